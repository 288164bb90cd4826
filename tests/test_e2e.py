import pytest
from httpx import AsyncClient


async def add_team(client, team_name, *members, inactive=()):
    team_data = {
        "team_name": team_name,
        "members": [
            {"user_id": uid, "username": uid.title(), "is_active": uid not in inactive}
            for uid in members
        ]
    }
    response = await client.post("/team/add", json=team_data)
    assert response.status_code == 201
    return response


async def create_pr(client, pr_id, author_id, name="Change"):
    return await client.post("/pullRequest/create", json={
        "pull_request_id": pr_id,
        "pull_request_name": name,
        "author_id": author_id
    })


@pytest.mark.asyncio
async def test_team_lifecycle(client: AsyncClient):
    """Team creation, repeat upsert with a new member, team lookup"""

    response = await add_team(client, "backend", "u3", "u1", "u2")
    assert response.json()["team"]["team_name"] == "backend"
    assert len(response.json()["team"]["members"]) == 3

    response = await add_team(client, "backend", "u4")
    assert len(response.json()["team"]["members"]) == 4

    response = await client.get("/team/get?team_name=backend")
    assert response.status_code == 200
    assert response.json()["team_name"] == "backend"
    assert [m["user_id"] for m in response.json()["members"]] == ["u1", "u2", "u3", "u4"]


@pytest.mark.asyncio
async def test_pr_creation_and_reviewers(client: AsyncClient):
    """PR creation assigns two active reviewers, never the author"""

    await add_team(client, "backend", "u1", "u2", "u3", "u4", inactive=("u4",))

    response = await create_pr(client, "pr-1001", "u1")
    assert response.status_code == 201
    pr = response.json()["pr"]
    assert pr["pull_request_id"] == "pr-1001"
    assert pr["status"] == "OPEN"
    assert pr["assigned_reviewers"] == ["u2", "u3"]
    assert pr["mergedAt"] is None


@pytest.mark.asyncio
async def test_pr_merge(client: AsyncClient):
    """Merge twice: same status, same timestamp"""

    await add_team(client, "devops", "u7", "u8")
    await create_pr(client, "pr-1002", "u7")

    merge_data = {"pull_request_id": "pr-1002"}
    response = await client.post("/pullRequest/merge", json=merge_data)
    assert response.status_code == 200
    first = response.json()["pr"]
    assert first["status"] == "MERGED"
    assert first["mergedAt"] is not None
    assert first["assigned_reviewers"] == ["u8"]

    response = await client.post("/pullRequest/merge", json=merge_data)
    assert response.status_code == 200
    assert response.json()["pr"]["status"] == "MERGED"
    assert response.json()["pr"]["mergedAt"] == first["mergedAt"]


@pytest.mark.asyncio
async def test_reviewer_reassignment(client: AsyncClient):
    """Reassignment replaces a reviewer with a free teammate"""

    await add_team(client, "qa", "u9", "u10", "u11", "u12")

    create_response = await create_pr(client, "pr-1003", "u9")
    old_reviewers = create_response.json()["pr"]["assigned_reviewers"]
    assert len(old_reviewers) == 2

    reassign_data = {
        "pull_request_id": "pr-1003",
        "old_user_id": old_reviewers[0]
    }
    response = await client.post("/pullRequest/reassign", json=reassign_data)
    assert response.status_code == 200
    replaced_by = response.json()["replaced_by"]
    reviewers = response.json()["pr"]["assigned_reviewers"]
    assert replaced_by not in old_reviewers
    assert replaced_by != "u9"
    assert replaced_by in reviewers
    assert old_reviewers[0] not in reviewers


@pytest.mark.asyncio
async def test_reassignment_without_candidate(client: AsyncClient):
    """No free teammate: the slot stays empty and replaced_by is null"""

    await add_team(client, "backend", "u1", "u2", "u3", "u4", inactive=("u4",))
    await create_pr(client, "pr1", "u1")

    response = await client.post("/pullRequest/reassign", json={
        "pull_request_id": "pr1",
        "old_user_id": "u2"
    })
    assert response.status_code == 200
    assert response.json()["replaced_by"] is None
    assert response.json()["pr"]["assigned_reviewers"] == ["u3"]


@pytest.mark.asyncio
async def test_reassignment_after_merge(client: AsyncClient):
    await add_team(client, "backend", "u1", "u2", "u3")
    await create_pr(client, "pr1", "u1")
    await client.post("/pullRequest/merge", json={"pull_request_id": "pr1"})

    response = await client.post("/pullRequest/reassign", json={
        "pull_request_id": "pr1",
        "old_user_id": "u2"
    })
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "PR_MERGED"

    response = await client.get("/users/getReview?user_id=u2")
    assert response.json()["pull_requests"][0]["status"] == "MERGED"


@pytest.mark.asyncio
async def test_user_deactivation(client: AsyncClient):
    """Deactivation and the unknown-user case"""

    await add_team(client, "support", "u12", "u13")

    response = await client.post("/users/setIsActive", json={"user_id": "u12", "is_active": False})
    assert response.status_code == 200
    assert response.json()["user"] == {
        "user_id": "u12",
        "username": "U12",
        "team_name": "support",
        "is_active": False
    }

    response = await client.post("/users/setIsActive", json={"user_id": "ghost", "is_active": False})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_get_user_reviews(client: AsyncClient):
    await add_team(client, "design", "u14", "u15")
    await create_pr(client, "pr-1004", "u14", name="Design update")

    response = await client.get("/users/getReview?user_id=u15")
    assert response.status_code == 200
    assert response.json() == {
        "user_id": "u15",
        "pull_requests": [{
            "pull_request_id": "pr-1004",
            "pull_request_name": "Design update",
            "author_id": "u14",
            "status": "OPEN"
        }]
    }


@pytest.mark.asyncio
async def test_error_cases(client: AsyncClient):
    response = await client.get("/team/get?team_name=nonexistent")
    assert response.status_code == 404
    assert response.json() == {"error": {"code": "NOT_FOUND", "message": "team not found"}}

    response = await client.post("/pullRequest/merge", json={"pull_request_id": "pr-9999"})
    assert response.status_code == 404

    response = await create_pr(client, "pr-x", "nobody")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"

    await add_team(client, "duplicate", "u19")
    await create_pr(client, "pr-duplicate", "u19")
    response = await create_pr(client, "pr-duplicate", "u19")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "PR_EXISTS"

    response = await client.post("/pullRequest/reassign", json={
        "pull_request_id": "pr-duplicate",
        "old_user_id": "u19"
    })
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "NOT_ASSIGNED"


@pytest.mark.asyncio
async def test_invalid_input(client: AsyncClient):
    response = await client.post("/pullRequest/create", json={
        "pull_request_id": "",
        "pull_request_name": "x",
        "author_id": "u1"
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"

    response = await client.post("/team/add", json={"members": []})
    assert response.status_code == 400

    response = await client.get("/users/getReview")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
