import uuid
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from movies.models import User, WatchlistEntry
from .helpers import make_user, make_movie, make_review


class SignupTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_signup_hashes_password(self):
        response = self.client.post(
            "/api/users/",
            {"username": "new_user", "email": "new@email.com", "password": "secret123"}
        )

        self.assertEqual(response.status_code, 201)
        self.assertNotIn("password", response.data)
        self.assertFalse(response.data["is_staff"])

        user = User.objects.get(email="new@email.com")
        self.assertNotEqual(user.password, "secret123")
        self.assertTrue(user.check_password("secret123"))

    def test_signup_cannot_grant_admin(self):
        response = self.client.post(
            "/api/users/",
            {"username": "sneaky", "email": "sneaky@email.com", "password": "secret123", "is_staff": True}
        )
        self.assertEqual(response.status_code, 201)
        self.assertFalse(User.objects.get(email="sneaky@email.com").is_staff)

    def test_invalid_username(self):
        for username in ("ab", "has space", "x" * 31):
            response = self.client.post(
                "/api/users/",
                {"username": username, "email": "new@email.com", "password": "secret123"}
            )
            self.assertEqual(response.status_code, 400, username)
            self.assertIn("username", response.data)

    def test_short_password(self):
        response = self.client.post(
            "/api/users/",
            {"username": "new_user", "email": "new@email.com", "password": "12345"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.data)

    def test_duplicate_email_or_username(self):
        make_user("critic")

        response = self.client.post(
            "/api/users/",
            {"username": "someone", "email": "critic@email.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("email", response.data)

        response = self.client.post(
            "/api/users/",
            {"username": "CRITIC", "email": "other@email.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("username", response.data)


class AccountTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user("critic")
        self.other = make_user("other")
        self.admin = make_user("admin", is_staff=True)

    def test_list_is_admin_only(self):
        self.client.force_authenticate(user=self.user)
        self.assertEqual(self.client.get("/api/users/").status_code, 403)

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/users/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["pagination"]["total_items"], 3)

    def test_me(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/users/me/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["email"], "critic@email.com")

    def test_public_profile(self):
        movie = make_movie()
        make_review(self.user, movie, 4)
        WatchlistEntry.objects.create(user=self.user, movie=make_movie("Memento", release_year=2000))

        response = self.client.get(f"/api/users/{self.user.user_id}/")

        self.assertEqual(response.status_code, 200)
        self.assertNotIn("email", response.data)
        self.assertEqual(response.data["review_count"], 1)
        self.assertEqual(response.data["watchlist_count"], 1)
        self.assertEqual(response.data["recent_reviews"][0]["movie"]["title"], "Inception")

    def test_owner_updates_account(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.patch(
            f"/api/users/{self.user.user_id}/", {"profile_picture": "https://example.com/me.png"}
        )

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.profile_picture, "https://example.com/me.png")

    def test_password_change_is_hashed(self):
        self.client.force_authenticate(user=self.user)
        self.client.patch(f"/api/users/{self.user.user_id}/", {"password": "another1"})

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("another1"))

    def test_put_without_password_keeps_it(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.put(
            f"/api/users/{self.user.user_id}/",
            {"username": "critic_2", "email": "critic@email.com", "profile_picture": "https://example.com/me.png"}
        )

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.username, "critic_2")
        self.assertTrue(self.user.check_password("pass"))

    def test_signup_still_requires_password(self):
        response = self.client.post("/api/users/", {"username": "new_user", "email": "new@email.com"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.data)

    def test_cannot_update_other_account(self):
        self.client.force_authenticate(user=self.other)
        response = self.client.patch(f"/api/users/{self.user.user_id}/", {"username": "renamed"})
        self.assertEqual(response.status_code, 403)

    def test_owner_deletes_account(self):
        self.client.force_authenticate(user=self.user)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(f"/api/users/{self.user.user_id}/")

        self.assertEqual(response.status_code, 204)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())


class WatchlistTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user("critic")
        self.other = make_user("other")
        self.movie = make_movie()
        self.url = f"/api/users/{self.user.user_id}/watchlist/"

    def test_add_movie(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.url, {"movie_id": str(self.movie.movie_id)})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["movie"]["title"], "Inception")
        self.assertTrue(WatchlistEntry.objects.filter(user=self.user, movie=self.movie).exists())

    def test_add_movie_twice(self):
        WatchlistEntry.objects.create(user=self.user, movie=self.movie)
        self.client.force_authenticate(user=self.user)

        response = self.client.post(self.url, {"movie_id": str(self.movie.movie_id)})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(WatchlistEntry.objects.filter(user=self.user).count(), 1)

    def test_add_requires_movie_id(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(self.url, {})
        self.assertEqual(response.status_code, 400)

    def test_add_unknown_movie(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post(self.url, {"movie_id": str(uuid.uuid4())})
        self.assertEqual(response.status_code, 404)

        response = self.client.post(self.url, {"movie_id": "not-a-uuid"})
        self.assertEqual(response.status_code, 404)

    def test_cannot_add_to_other_users_watchlist(self):
        self.client.force_authenticate(user=self.other)
        response = self.client.post(self.url, {"movie_id": str(self.movie.movie_id)})
        self.assertEqual(response.status_code, 403)

    def test_add_requires_login(self):
        response = self.client.post(self.url, {"movie_id": str(self.movie.movie_id)})
        self.assertEqual(response.status_code, 401)

    def test_watchlist_is_public_newest_first(self):
        older = WatchlistEntry.objects.create(user=self.user, movie=self.movie)
        WatchlistEntry.objects.filter(pk=older.pk).update(date_added=timezone.now() - timedelta(days=1))
        WatchlistEntry.objects.create(user=self.user, movie=make_movie("Memento", release_year=2000))

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["pagination"]["total_items"], 2)
        self.assertEqual(
            [entry["movie"]["title"] for entry in response.data["results"]], ["Memento", "Inception"]
        )

    def test_remove_movie(self):
        WatchlistEntry.objects.create(user=self.user, movie=self.movie)
        self.client.force_authenticate(user=self.user)

        response = self.client.delete(f"{self.url}{self.movie.movie_id}/")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.content, b"")
        self.assertFalse(WatchlistEntry.objects.filter(user=self.user).exists())

        response = self.client.delete(f"{self.url}{self.movie.movie_id}/")
        self.assertEqual(response.status_code, 404)

    def test_remove_malformed_id(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.delete(f"{self.url}not-a-uuid/")
        self.assertEqual(response.status_code, 404)

    def test_cannot_remove_from_other_users_watchlist(self):
        WatchlistEntry.objects.create(user=self.user, movie=self.movie)
        self.client.force_authenticate(user=self.other)

        response = self.client.delete(f"{self.url}{self.movie.movie_id}/")
        self.assertEqual(response.status_code, 403)
        self.assertTrue(WatchlistEntry.objects.filter(user=self.user).exists())
