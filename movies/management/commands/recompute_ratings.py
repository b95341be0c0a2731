import uuid

from django.core.management.base import BaseCommand, CommandError
from movies.exceptions import PersistenceError
from movies.models import Movie
from movies.utils import recompute_all_movie_ratings


class Command(BaseCommand):
    help = 'Recompute the average rating and review count of movies from their reviews'

    def add_arguments(self, parser):
        parser.add_argument('movie_ids',
                            nargs='*',
                            type=str,
                            help='Only recompute these movies (default: all movies)')

    def handle(self, *args, **kwargs):
        movie_ids = None

        if kwargs['movie_ids']:
            try:
                movie_ids = [uuid.UUID(value) for value in kwargs['movie_ids']]
            except ValueError as e:
                raise CommandError(f"Invalid movie id: {e}")

            found = set(Movie.objects.filter(movie_id__in=movie_ids).values_list('movie_id', flat=True))
            missing = [str(movie_id) for movie_id in movie_ids if movie_id not in found]
            if missing:
                raise CommandError(f"Unknown movie ids: {', '.join(missing)}")

        try:
            count = recompute_all_movie_ratings(movie_ids)
        except PersistenceError as e:
            raise CommandError(f"Recompute failed: {e.__cause__}") from e

        self.stdout.write(self.style.SUCCESS(f'Recomputed rating summaries for {count} movies'))
