"""
Check Hierarchy Command.

Audits the assembly/part forest for dangling parent references, parts
used as parents and assembly cycles.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from domain.inventory.hierarchy import HierarchyEngine
from infrastructure.persistence.factory import get_document_store


class Command(BaseCommand):
    help = 'Check the inventory hierarchy for inconsistencies'

    def handle(self, *args, **options):
        engine = HierarchyEngine(get_document_store())
        report = async_to_sync(engine.find_inconsistencies)()

        for issue in report.dangling_references:
            self.stdout.write(self.style.WARNING(
                f"  {issue['kind']} {issue['id']}: parent {issue['parent_id']} does not exist"
            ))
        for issue in report.part_parents:
            self.stdout.write(self.style.WARNING(
                f"  {issue['kind']} {issue['id']}: parent {issue['parent_id']} is a part"
            ))
        for cycle in report.cycles:
            self.stdout.write(self.style.WARNING(
                '  cycle: ' + ' -> '.join(cycle + cycle[:1])
            ))

        if not report.is_consistent:
            raise CommandError(f'Hierarchy check failed: {report.issues_count} issues found')

        self.stdout.write(self.style.SUCCESS('Hierarchy is consistent.'))
