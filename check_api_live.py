#!/usr/bin/env python
"""Live check of the inventory API against a running server."""

import sys

import requests

BASE_URL = "http://localhost:8000/api/v1"

# Skip HTTP(S)_PROXY for localhost.
session = requests.Session()
session.trust_env = False


class CheckFailed(Exception):
    pass


def expect(response, status_code):
    if response.status_code != status_code:
        raise CheckFailed(
            f"{response.request.method} {response.url}: expected {status_code}, "
            f"got {response.status_code}: {response.text[:300]}"
        )
    return response


def create(resource, **body):
    r = expect(session.post(f"{BASE_URL}/{resource}/", json=body, timeout=10), 201)
    return r.json()["id"]


def reparent(resource, node_id, parent_id):
    expect(session.put(
        f"{BASE_URL}/{resource}/{node_id}/",
        json={"parentAssemblyId": parent_id},
        timeout=10,
    ), 204)


def check_api():
    print("=" * 80)
    print("INVENTORY API CHECK")
    print("=" * 80)
    print()

    # Build: root -> sub -> part
    root_id = create("assemblies", name="Smoke root")
    sub_id = create("assemblies", name="Smoke sub")
    part_id = create("parts", name="Smoke part", color="red", material="steel")
    reparent("assemblies", sub_id, root_id)
    reparent("parts", part_id, sub_id)
    print(f"✓ Created root {root_id}, sub {sub_id}, part {part_id}")

    children = expect(session.get(f"{BASE_URL}/assemblies/{root_id}/children/", timeout=10), 200).json()
    ids = {c["id"] for c in children}
    if ids != {sub_id, part_id}:
        raise CheckFailed(f"unexpected children of root: {sorted(ids)}")
    print(f"✓ Children of root: {len(children)}")

    chain = expect(session.get(f"{BASE_URL}/parts/{part_id}/parent/", timeout=10), 200).json()
    if chain != [sub_id, root_id]:
        raise CheckFailed(f"unexpected ancestor chain: {chain}")
    print("✓ Ancestor chain of part is [sub, root]")

    r = session.get(
        f"{BASE_URL}/assemblies/{root_id}/children/?firstLevelOnly=true&componentPartsOnly=true",
        timeout=10,
    )
    expect(r, 400)
    print(f"✓ Conflicting filters rejected: {r.text}")

    expect(session.delete(f"{BASE_URL}/assemblies/{sub_id}/", timeout=10), 204)
    part = expect(session.get(f"{BASE_URL}/parts/{part_id}/", timeout=10), 200).json()
    if part["parentId"] is not None:
        raise CheckFailed(f"part was not orphaned: {part}")
    print("✓ Deleting the sub-assembly orphaned its part")

    expect(session.get(f"{BASE_URL}/assemblies/{sub_id}/", timeout=10), 404)
    print("✓ Deleted sub-assembly answers 404")

    # Cleanup
    expect(session.delete(f"{BASE_URL}/parts/{part_id}/", timeout=10), 204)
    expect(session.delete(f"{BASE_URL}/assemblies/{root_id}/", timeout=10), 204)

    print()
    print("=" * 80)
    print("✅ ALL CHECKS PASSED")
    print("=" * 80)


if __name__ == '__main__':
    try:
        check_api()
    except requests.exceptions.ConnectionError:
        print("✗ Could not connect to the API")
        print("Make sure the backend is running on http://localhost:8000")
        sys.exit(1)
    except CheckFailed as e:
        print(f"✗ {e}")
        sys.exit(1)
