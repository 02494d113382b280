"""Task Routes — ownership chain, path-parent checks and task PATCH semantics.

Invariants:
    - A task of another owned project addressed under the wrong project -> 400
    - A task owned by someone else -> 403, distinct from the path-parent error
    - PATCH/DELETE enforce the path-parent check too
    - The path project is resolved first: missing -> 404, foreign -> 403
"""

from datetime import date, timedelta

from sqlalchemy import func, select

from taskmanager.models import Collaboration, TaskFile


def _day(offset: int) -> str:
    return (date.today() + timedelta(days=offset)).isoformat()


async def test_create_and_get(client, signup, make_project):
    alice = await signup("alice")
    project = await make_project(alice)
    res = await client.post(f"/projects/{project['id']}/tasks", json={
        "name": "Design", "status": "in_progress", "due_date": _day(3),
        "description": "Sketch the API",
    }, headers=alice["headers"])
    assert res.status_code == 201
    task = res.json()
    assert task["status"] == "IN_PROGRESS"
    assert task["project_id"] == project["id"]

    res = await client.get(
        f"/projects/{project['id']}/tasks/{task['id']}", headers=alice["headers"],
    )
    assert res.json() == task


async def test_create_rejects_past_due_date(client, signup, make_project):
    alice = await signup("alice")
    project = await make_project(alice)
    res = await client.post(f"/projects/{project['id']}/tasks", json={
        "name": "Late", "status": "TODO", "due_date": _day(-2),
    }, headers=alice["headers"])
    assert res.status_code == 400


async def test_create_under_foreign_project_denied(client, signup, make_project):
    alice = await signup("alice")
    bob = await signup("bob")
    project = await make_project(alice)
    res = await client.post(f"/projects/{project['id']}/tasks", json={
        "name": "Sneaky", "status": "TODO", "due_date": _day(3),
    }, headers=bob["headers"])
    assert res.status_code == 403


async def test_wrong_parent_is_invalid_argument(client, signup, make_project, make_task):
    alice = await signup("alice")
    first = await make_project(alice, "First")
    second = await make_project(alice, "Second")
    task = await make_task(alice, second["id"])
    url = f"/projects/{first['id']}/tasks/{task['id']}"

    for res in (
        await client.get(url, headers=alice["headers"]),
        await client.patch(url, json={"name": "Moved"}, headers=alice["headers"]),
        await client.delete(url, headers=alice["headers"]),
    ):
        assert res.status_code == 400
        assert res.json()["error"]["message"] == (
            "Task does not belong to the specified project."
        )

    res = await client.get(
        f"/projects/{second['id']}/tasks/{task['id']}", headers=alice["headers"],
    )
    assert res.json()["name"] == "Design"


async def test_foreign_task_is_access_denied(client, signup, make_project, make_task):
    alice = await signup("alice")
    bob = await signup("bob")
    alice_project = await make_project(alice)
    bob_project = await make_project(bob)
    bob_task = await make_task(bob, bob_project["id"])

    res = await client.get(
        f"/projects/{alice_project['id']}/tasks/{bob_task['id']}",
        headers=alice["headers"],
    )
    assert res.status_code == 403
    assert res.json()["error"]["message"] == (
        "Access denied: task does not belong to a project of current user."
    )


async def test_path_project_resolved_before_task(
    client, signup, make_project, make_task,
):
    alice = await signup("alice")
    bob = await signup("bob")
    alice_project = await make_project(alice)
    task = await make_task(alice, alice_project["id"])
    bob_project = await make_project(bob)

    res = await client.get(f"/projects/999/tasks/{task['id']}", headers=alice["headers"])
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Project not found."

    url = f"/projects/{bob_project['id']}/tasks/{task['id']}"
    for res in (
        await client.get(url, headers=alice["headers"]),
        await client.patch(url, json={"name": "Moved"}, headers=alice["headers"]),
        await client.delete(url, headers=alice["headers"]),
    ):
        assert res.status_code == 403
        assert res.json()["error"]["message"] == (
            "Access denied: project does not belong to current user."
        )


async def test_missing_task_is_not_found(client, signup, make_project):
    alice = await signup("alice")
    project = await make_project(alice)
    res = await client.get(
        f"/projects/{project['id']}/tasks/999", headers=alice["headers"],
    )
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Task not found."


async def test_patch_keeps_omitted_fields(client, signup, make_project, make_task):
    alice = await signup("alice")
    project = await make_project(alice)
    task = await make_task(alice, project["id"], description="keep me")
    res = await client.patch(
        f"/projects/{project['id']}/tasks/{task['id']}",
        json={"status": "done"}, headers=alice["headers"],
    )
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "DONE"
    assert body["description"] == "keep me"
    assert body["due_date"] == task["due_date"]


async def test_list_filters_and_sorts(client, signup, make_project, make_task):
    alice = await signup("alice")
    project = await make_project(alice)
    await make_task(alice, project["id"], "write docs", due_date=_day(5))
    await make_task(alice, project["id"], "Write tests", due_date=_day(2), status="DONE")
    await make_task(alice, project["id"], "deploy", due_date=_day(9))
    url = f"/projects/{project['id']}/tasks/page"

    res = await client.get(
        url, params={"sortBy": "dueDate", "direction": "DESC"}, headers=alice["headers"],
    )
    assert [t["name"] for t in res.json()["content"]] == [
        "deploy", "write docs", "Write tests",
    ]

    res = await client.get(url, params={"name": "write"}, headers=alice["headers"])
    assert res.json()["total_elements"] == 2

    res = await client.get(url, params={"status": "done"}, headers=alice["headers"])
    assert [t["name"] for t in res.json()["content"]] == ["Write tests"]

    res = await client.get(url, params={"dueDate": _day(9)}, headers=alice["headers"])
    assert [t["name"] for t in res.json()["content"]] == ["deploy"]

    res = await client.get(url, params={"sortBy": "status"}, headers=alice["headers"])
    assert res.json()["error"]["message"] == "Invalid sort field. Allowed: name, dueDate."


async def test_delete_cascades_files_and_collaborators(
    client, signup, make_project, make_task, test_db,
):
    alice = await signup("alice")
    bob = await signup("bob")
    project = await make_project(alice)
    task = await make_task(alice, project["id"])
    keep = await make_task(alice, project["id"], "Keep")
    for target in (task, keep):
        await client.post(
            f"/tasks/{target['id']}/files",
            files={"file": ("a.txt", b"data", "text/plain")},
            headers=alice["headers"],
        )
    await client.post(
        f"/tasks/{task['id']}/collaborators",
        json={"user_id": bob["id"], "responsible": True}, headers=alice["headers"],
    )

    res = await client.delete(
        f"/projects/{project['id']}/tasks/{task['id']}", headers=alice["headers"],
    )
    assert res.status_code == 204
    assert await test_db.scalar(select(func.count(TaskFile.id))) == 1
    assert await test_db.scalar(select(func.count(Collaboration.id))) == 0
