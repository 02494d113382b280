"""Collaborator Routes — the responsible-collaborator rule end to end.

Invariants:
    - At most one responsible collaborator per task after every operation
    - Promoting a second user demotes the first in the same request
    - The responsible collaborator cannot be removed until another is promoted
"""

import pytest
from sqlalchemy import func, select

from taskmanager.models import Collaboration


@pytest.fixture
async def collab_env(client, signup, make_project, make_task):
    owner = await signup("owner")
    u1 = await signup("uone")
    u2 = await signup("utwo")
    project = await make_project(owner)
    task = await make_task(owner, project["id"])
    return {"owner": owner, "u1": u1, "u2": u2, "task_id": task["id"]}


async def _assign(client, collab_env, user, responsible):
    return await client.post(
        f"/tasks/{collab_env['task_id']}/collaborators",
        json={"user_id": user["id"], "responsible": responsible},
        headers=collab_env["owner"]["headers"],
    )


async def _responsible(client, collab_env):
    return await client.get(
        f"/tasks/{collab_env['task_id']}/responsible", headers=collab_env["owner"]["headers"],
    )


async def _remove(client, collab_env, user):
    return await client.delete(
        f"/tasks/{collab_env['task_id']}/collaborators/{user['id']}",
        headers=collab_env["owner"]["headers"],
    )


async def _responsible_count(test_db, task_id):
    return await test_db.scalar(
        select(func.count(Collaboration.id))
        .where(Collaboration.task_id == task_id)
        .where(Collaboration.responsible.is_(True))
    )


async def test_no_responsible_yet(client, collab_env):
    res = await _responsible(client, collab_env)
    assert res.status_code == 404
    assert res.json()["error"]["message"] == (
        "No responsible collaborator defined for this task."
    )


async def test_responsibility_handover_scenario(client, collab_env, test_db):
    u1, u2 = collab_env["u1"], collab_env["u2"]

    res = await _assign(client, collab_env, u1, True)
    assert res.status_code == 201
    assert res.json() == {
        "user_id": u1["id"], "username": "uone",
        "email": "uone@example.com", "responsible": True,
    }
    assert (await _responsible(client, collab_env)).json()["user_id"] == u1["id"]

    res = await _assign(client, collab_env, u2, True)
    assert res.status_code == 201
    assert (await _responsible(client, collab_env)).json()["user_id"] == u2["id"]

    listing = await client.get(
        f"/tasks/{collab_env['task_id']}/collaborators", headers=collab_env["owner"]["headers"],
    )
    flags = {c["username"]: c["responsible"] for c in listing.json()["content"]}
    assert flags == {"uone": False, "utwo": True}

    res = await _remove(client, collab_env, u2)
    assert res.status_code == 409
    assert res.json()["error"]["message"] == (
        "Cannot remove the responsible collaborator without assigning another "
        "responsible first."
    )

    assert (await _assign(client, collab_env, u1, True)).status_code == 201
    res = await _remove(client, collab_env, u2)
    assert res.status_code == 204

    assert (await _responsible(client, collab_env)).json()["user_id"] == u1["id"]
    assert await _responsible_count(test_db, collab_env["task_id"]) == 1


async def test_repromoting_responsible_conflicts(client, collab_env):
    await _assign(client, collab_env, collab_env["u1"], True)
    res = await _assign(client, collab_env, collab_env["u1"], True)
    assert res.status_code == 409
    assert res.json()["error"]["message"] == "User is already responsible for this task."


async def test_explicit_demotion_allowed(client, collab_env, test_db):
    await _assign(client, collab_env, collab_env["u1"], True)
    res = await _assign(client, collab_env, collab_env["u1"], False)
    assert res.status_code == 201
    assert res.json()["responsible"] is False
    assert (await _responsible(client, collab_env)).status_code == 404

    res = await _remove(client, collab_env, collab_env["u1"])
    assert res.status_code == 204
    assert await _responsible_count(test_db, collab_env["task_id"]) == 0


async def test_one_row_per_task_and_user(client, collab_env, test_db):
    await _assign(client, collab_env, collab_env["u1"], False)
    await _assign(client, collab_env, collab_env["u1"], True)
    rows = await test_db.scalar(
        select(func.count(Collaboration.id))
        .where(Collaboration.task_id == collab_env["task_id"])
    )
    assert rows == 1


async def test_unknown_user_and_missing_row(client, collab_env):
    res = await client.post(
        f"/tasks/{collab_env['task_id']}/collaborators",
        json={"user_id": 9999, "responsible": False},
        headers=collab_env["owner"]["headers"],
    )
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Collaborator user not found."

    res = await _remove(client, collab_env, collab_env["u2"])
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Collaborator not found for this task."


async def test_non_owner_cannot_manage_collaborators(client, collab_env):
    res = await client.post(
        f"/tasks/{collab_env['task_id']}/collaborators",
        json={"user_id": collab_env["u2"]["id"], "responsible": True},
        headers=collab_env["u1"]["headers"],
    )
    assert res.status_code == 403
    res = await client.get(
        f"/tasks/{collab_env['task_id']}/responsible", headers=collab_env["u1"]["headers"],
    )
    assert res.status_code == 403


async def test_list_sorting_and_filters(client, collab_env):
    await _assign(client, collab_env, collab_env["u2"], False)
    await _assign(client, collab_env, collab_env["u1"], True)
    url = f"/tasks/{collab_env['task_id']}/collaborators"
    headers = collab_env["owner"]["headers"]

    res = await client.get(url, params={"direction": "desc"}, headers=headers)
    assert [c["username"] for c in res.json()["content"]] == ["utwo", "uone"]

    res = await client.get(url, params={"email": "UONE@"}, headers=headers)
    assert [c["username"] for c in res.json()["content"]] == ["uone"]

    res = await client.get(url, params={"sortBy": "responsible"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["error"]["message"] == (
        "Invalid sort field. Allowed: username, email."
    )
