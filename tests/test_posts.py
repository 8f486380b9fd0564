"""
Tests for posts endpoints.
"""
import uuid
from datetime import datetime, timedelta, timezone

from socialnet.models.post import Post


def create_post(client, headers, desc="Test post content", img=None):
    response = client.post("/api/createPost", json={"desc": desc, "img": img}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestCreatePost:
    """Test post creation and mention resolution."""

    def test_create_post(self, client, test_user, auth_headers):
        """Test creating a post."""
        data = create_post(client, auth_headers, desc="First post", img="/images/1.png")
        assert data["desc"] == "First post"
        assert data["img"] == "/images/1.png"
        assert data["user_id"] == test_user.id
        assert data["likes"] == []
        assert data["comments"] == []

    def test_create_post_unauthenticated(self, client):
        """Test creating a post without auth fails."""
        response = client.post("/api/createPost", json={"desc": "Test content"})
        assert response.status_code == 401

    def test_create_post_requires_desc(self, client, auth_headers):
        response = client.post("/api/createPost", json={"img": "x.png"}, headers=auth_headers)
        assert response.status_code == 400

    def test_mention_resolves_to_user_id(self, client, test_user, other_headers):
        data = create_post(client, other_headers, desc="hello @alice")
        assert data["mentions"] == [test_user.id]

    def test_unknown_mention_is_dropped(self, client, auth_headers):
        data = create_post(client, auth_headers, desc="hello @nonexistent")
        assert data["mentions"] == []

    def test_mentions_keep_first_appearance_order(self, client, test_user, other_user, auth_headers):
        data = create_post(client, auth_headers, desc="@bob and @alice and @bob again, @ghost")
        assert data["mentions"] == [other_user.id, test_user.id]


class TestReadPosts:
    def test_get_post(self, client, auth_headers):
        post = create_post(client, auth_headers)
        response = client.get(f"/api/getPost/{post['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["id"] == post["id"]

    def test_get_post_by_user_id_is_not_found(self, client, test_user, auth_headers):
        """getPost looks up by post id only."""
        create_post(client, auth_headers)
        response = client.get(f"/api/getPost/{test_user.id}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Post not found"

    def test_get_post_invalid_id(self, client, auth_headers):
        response = client.get("/api/getPost/abc", headers=auth_headers)
        assert response.status_code == 400

    def test_get_all_posts_pagination(self, client, auth_headers):
        for i in range(3):
            create_post(client, auth_headers, desc=f"post {i}")

        response = client.get("/api/getAllPosts", params={"page": 1, "limit": 2}, headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert len(data["posts"]) == 2
        assert data["totalPages"] == 2
        assert data["currentPage"] == 1
        assert data["totalPosts"] == 3

        response = client.get("/api/getAllPosts", params={"page": 2, "limit": 2}, headers=auth_headers)
        assert len(response.json()["posts"]) == 1

    def test_get_all_posts_empty(self, client, auth_headers):
        response = client.get("/api/getAllPosts", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["posts"] == []
        assert data["totalPages"] == 0
        assert data["totalPosts"] == 0

    def test_get_all_posts_sort_order(self, client, test_user, auth_headers, db):
        now = datetime.now(timezone.utc)
        older = Post(user_id=test_user.id, desc="older", created_at=now - timedelta(days=1))
        newer = Post(user_id=test_user.id, desc="newer", created_at=now)
        db.add_all([older, newer])
        db.commit()

        response = client.get("/api/getAllPosts", params={"order": "asc"}, headers=auth_headers)
        assert [p["desc"] for p in response.json()["posts"]] == ["older", "newer"]

    def test_get_all_posts_unknown_sort_field(self, client, auth_headers):
        response = client.get("/api/getAllPosts", params={"sortBy": "desc"}, headers=auth_headers)
        assert response.status_code == 400

    def test_get_posts_by_user_newest_first(self, client, test_user, other_user, auth_headers, db):
        now = datetime.now(timezone.utc)
        db.add_all([
            Post(user_id=test_user.id, desc="first", created_at=now - timedelta(hours=2)),
            Post(user_id=test_user.id, desc="second", created_at=now - timedelta(hours=1)),
            Post(user_id=other_user.id, desc="not mine", created_at=now),
        ])
        db.commit()

        response = client.get(f"/api/getPostsByUser/{test_user.id}", headers=auth_headers)
        assert response.status_code == 200
        assert [p["desc"] for p in response.json()] == ["second", "first"]


class TestUpdatePost:
    def test_update_replaces_mentions(self, client, test_user, other_user, auth_headers):
        post = create_post(client, auth_headers, desc="hi @bob")
        assert post["mentions"] == [other_user.id]

        response = client.put(
            f"/api/updatePost/{post['id']}",
            json={"desc": "actually @alice"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["desc"] == "actually @alice"
        assert data["mentions"] == [test_user.id]

    def test_update_by_non_owner_forbidden(self, client, auth_headers, other_headers):
        post = create_post(client, auth_headers, desc="mine")
        response = client.put(
            f"/api/updatePost/{post['id']}",
            json={"desc": "yours now"},
            headers=other_headers,
        )
        assert response.status_code == 403

    def test_update_unknown_post(self, client, auth_headers):
        response = client.put(
            f"/api/updatePost/{uuid.uuid4()}",
            json={"desc": "nothing"},
            headers=auth_headers,
        )
        assert response.status_code == 404


class TestDeletePost:
    def test_non_owner_cannot_delete(self, client, auth_headers, other_headers):
        post = create_post(client, auth_headers, desc="keep me")
        response = client.delete(f"/api/deletePost/{post['id']}", headers=other_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "You are not authorized to delete this post"

        response = client.get(f"/api/getPost/{post['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["desc"] == "keep me"

    def test_owner_deletes(self, client, auth_headers):
        post = create_post(client, auth_headers)
        response = client.delete(f"/api/deletePost/{post['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Post deleted successfully"

        response = client.get(f"/api/getPost/{post['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_admin_deletes(self, client, auth_headers, admin_headers):
        post = create_post(client, auth_headers)
        response = client.delete(f"/api/deletePost/{post['id']}", headers=admin_headers)
        assert response.status_code == 200

        response = client.get(f"/api/getPost/{post['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_delete_unknown_post_is_not_found(self, client, other_headers):
        response = client.delete(f"/api/deletePost/{uuid.uuid4()}", headers=other_headers)
        assert response.status_code == 404


class TestLikePost:
    def test_like_toggles(self, client, test_user, auth_headers):
        post = create_post(client, auth_headers)

        response = client.put(f"/api/likePost/{post['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Post has been liked", "liked": True}

        response = client.put(f"/api/likePost/{post['id']}", headers=auth_headers)
        assert response.json() == {"message": "Post has been disliked", "liked": False}

        likes = client.get(f"/api/getPost/{post['id']}", headers=auth_headers).json()["likes"]
        assert likes == []

    def test_odd_number_of_likes_leaves_one(self, client, test_user, auth_headers):
        post = create_post(client, auth_headers)
        for _ in range(3):
            client.put(f"/api/likePost/{post['id']}", headers=auth_headers)

        likes = client.get(f"/api/getPost/{post['id']}", headers=auth_headers).json()["likes"]
        assert likes == [test_user.id]

    def test_likes_from_different_users(self, client, db, test_user, auth_headers, other_headers):
        post = create_post(client, auth_headers)
        client.put(f"/api/likePost/{post['id']}", headers=auth_headers)
        client.put(f"/api/likePost/{post['id']}", headers=other_headers)

        likes = client.get(f"/api/getPost/{post['id']}", headers=auth_headers).json()["likes"]
        assert len(likes) == 2
        assert test_user.id in likes

    def test_like_unknown_post(self, client, auth_headers):
        response = client.put(f"/api/likePost/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404
