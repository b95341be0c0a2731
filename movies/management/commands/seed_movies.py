import os

from django.core.management.base import BaseCommand
from django.db import transaction
from movies.models import User, Movie, Genre


ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@moviereview.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "Admin123!")

SAMPLE_MOVIES = [
    {
        "title": "The Shawshank Redemption",
        "genres": ["Drama"],
        "release_year": 1994,
        "director": "Frank Darabont",
        "cast": [
            {"name": "Tim Robbins", "character": "Andy Dufresne"},
            {"name": "Morgan Freeman", "character": "Ellis Boyd 'Red' Redding"},
        ],
        "synopsis": "Two imprisoned men bond over a number of years, finding solace and eventual "
                    "redemption through acts of common decency.",
        "duration": 142,
        "poster_url": "/shawshank-redemption-poster.png",
    },
    {
        "title": "The Godfather",
        "genres": ["Crime", "Drama"],
        "release_year": 1972,
        "director": "Francis Ford Coppola",
        "cast": [
            {"name": "Marlon Brando", "character": "Don Vito Corleone"},
            {"name": "Al Pacino", "character": "Michael Corleone"},
        ],
        "synopsis": "The aging patriarch of an organized crime dynasty transfers control of his "
                    "clandestine empire to his reluctant son.",
        "duration": 175,
        "poster_url": "/classic-mob-poster.png",
    },
    {
        "title": "The Dark Knight",
        "genres": ["Action", "Crime", "Drama"],
        "release_year": 2008,
        "director": "Christopher Nolan",
        "cast": [
            {"name": "Christian Bale", "character": "Bruce Wayne / Batman"},
            {"name": "Heath Ledger", "character": "Joker"},
        ],
        "synopsis": "When the menace known as the Joker wreaks havoc and chaos on the people of "
                    "Gotham, Batman must accept one of the greatest psychological and physical tests.",
        "duration": 152,
        "poster_url": "/dark-knight-batman-movie-poster.jpg",
    },
    {
        "title": "Pulp Fiction",
        "genres": ["Crime", "Drama"],
        "release_year": 1994,
        "director": "Quentin Tarantino",
        "cast": [
            {"name": "John Travolta", "character": "Vincent Vega"},
            {"name": "Samuel L. Jackson", "character": "Jules Winnfield"},
        ],
        "synopsis": "The lives of two mob hitmen, a boxer, a gangster and his wife intertwine in "
                    "four tales of violence and redemption.",
        "duration": 154,
        "poster_url": "/pulp-fiction-poster.png",
    },
    {
        "title": "Forrest Gump",
        "genres": ["Drama", "Romance"],
        "release_year": 1994,
        "director": "Robert Zemeckis",
        "cast": [{"name": "Tom Hanks", "character": "Forrest Gump"}],
        "synopsis": "The presidencies of Kennedy and Johnson, the events of Vietnam, Watergate and "
                    "other historical events unfold from the perspective of an Alabama man.",
        "duration": 142,
        "poster_url": "/forrest-gump-poster.png",
    },
    {
        "title": "Inception",
        "genres": ["Action", "Sci-Fi", "Thriller"],
        "release_year": 2010,
        "director": "Christopher Nolan",
        "cast": [
            {"name": "Leonardo DiCaprio", "character": "Dom Cobb"},
            {"name": "Marion Cotillard", "character": "Mal"},
        ],
        "synopsis": "A thief who steals corporate secrets through the use of dream-sharing "
                    "technology is given the inverse task of planting an idea.",
        "duration": 148,
        "poster_url": "/inception-movie-poster.png",
    },
]


class Command(BaseCommand):
    help = 'Seed an admin account and a sample movie catalogue into an empty database'

    def handle(self, *args, **kwargs):
        # Never touch a catalogue that already has movies
        if Movie.objects.exists():
            self.stdout.write(self.style.WARNING('Movies already exist, skipping seed'))
            return

        with transaction.atomic():
            admin = User.objects.filter(email=ADMIN_EMAIL).first()
            if admin is None:
                admin = User.objects.create_superuser(
                    username='admin',
                    email=ADMIN_EMAIL,
                    password=ADMIN_PASSWORD
                )

            for data in SAMPLE_MOVIES:
                data = dict(data)
                genre_names = data.pop('genres')
                movie = Movie.objects.create(added_by=admin, **data)
                movie.genres.set([Genre.objects.get_or_create(name=name)[0] for name in genre_names])

        self.stdout.write(self.style.SUCCESS(f'Seeded {len(SAMPLE_MOVIES)} movies'))
