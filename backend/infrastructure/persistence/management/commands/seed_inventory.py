"""
Seed Inventory Command.

Purpose:
- Clear the assembly and part collections.
- Seed a demo forest: top-level assemblies, each with one sub-assembly,
  parts under both levels, plus a few orphan parts.

This command is intended for local demo environments.
"""

from __future__ import annotations

from typing import List

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from domain.inventory.entities import Assembly, Part
from domain.inventory.repositories import Document, DocumentStore
from domain.shared.value_objects import NodeKind
from infrastructure.persistence.factory import get_document_store

COLORS = ('black', 'silver', 'red', 'blue')
MATERIALS = ('steel', 'aluminium', 'brass', 'nylon')


class Command(BaseCommand):
    help = 'Reset the inventory collections and seed a demo assembly forest'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Only clear the collections (no seeding)'
        )
        parser.add_argument(
            '--assemblies',
            type=int,
            default=3,
            help='Number of top-level assemblies to create'
        )
        parser.add_argument(
            '--parts-per-assembly',
            type=int,
            default=4,
            help='Number of parts placed under each assembly'
        )

    def handle(self, *args, **options):
        assemblies = options['assemblies']
        parts_per_assembly = options['parts_per_assembly']
        if assemblies < 0 or parts_per_assembly < 0:
            raise CommandError('Counts must not be negative')

        store = get_document_store()

        self.stdout.write('Clearing inventory collections...')
        async_to_sync(self._clear)(store)
        self.stdout.write(self.style.SUCCESS('Inventory collections cleared.'))

        if options['clear']:
            return

        assembly_docs, part_docs = self._build_forest(store, assemblies, parts_per_assembly)
        async_to_sync(self._insert)(store, assembly_docs, part_docs)

        self.stdout.write(self.style.SUCCESS(
            f'Seeded {len(assembly_docs)} assemblies and {len(part_docs)} parts.'
        ))

    async def _clear(self, store: DocumentStore) -> None:
        await store.delete_many(NodeKind.PART, {})
        await store.delete_many(NodeKind.ASSEMBLY, {})

    async def _insert(self, store: DocumentStore, assembly_docs, part_docs) -> None:
        await store.insert_many(NodeKind.ASSEMBLY, assembly_docs)
        await store.insert_many(NodeKind.PART, part_docs)

    def _build_forest(self, store: DocumentStore, assemblies: int, parts_per_assembly: int):
        assembly_docs: List[Document] = []
        part_docs: List[Document] = []
        part_number = 0

        def add_parts(parent_id):
            nonlocal part_number
            for _ in range(parts_per_assembly):
                part_number += 1
                part_docs.append(Part(
                    id=store.new_id(),
                    name=f'Part {part_number:03d}',
                    parent_id=parent_id,
                    color=COLORS[part_number % len(COLORS)],
                    material=MATERIALS[part_number % len(MATERIALS)],
                ).to_document())

        for index in range(1, assemblies + 1):
            top = Assembly(id=store.new_id(), name=f'Assembly {index}')
            sub = Assembly(id=store.new_id(), name=f'Assembly {index}.1', parent_id=top.id)
            assembly_docs.extend([top.to_document(), sub.to_document()])
            add_parts(top.id)
            add_parts(sub.id)

        # Loose parts for the orphanPartsOnly filter
        if assemblies:
            add_parts(None)

        return assembly_docs, part_docs
