from decimal import Decimal, ROUND_HALF_UP
import logging

from django.core.cache import cache
from django.db import DatabaseError

from .exceptions import PersistenceError
from .models import Movie, Review


logger = logging.getLogger(__name__)

GENRES_CACHE_KEY = "movie_genres"
ONE_DECIMAL = Decimal('0.1')


def summarize_ratings(ratings):
    """ Return (average, total) for a sequence of integer ratings

        The average is rounded to one decimal place, half up, in exact decimal
        arithmetic so that e.g. 4.25 becomes 4.3. No ratings gives (0, 0).
    """
    ratings = list(ratings)
    if not ratings:
        return Decimal('0.0'), 0

    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return mean.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP), len(ratings)


def recompute_movie_rating(movie_id):
    """ Recompute and store the average rating and review count of a movie
        from all of its current reviews

        Writes absolute values, so repeated or concurrent calls converge on the
        current set of reviews. Database failures are raised as PersistenceError.
    """
    try:
        ratings = Review.objects.filter(movie_id=movie_id).values_list('rating', flat=True)
        average_rating, total_reviews = summarize_ratings(ratings)
        updated = Movie.objects.filter(pk=movie_id).update(
            average_rating=average_rating,
            total_reviews=total_reviews,
        )
    except DatabaseError as e:
        logger.exception("Failed to update rating summary for movie %s", movie_id)
        raise PersistenceError() from e

    if not updated:
        logger.warning("Rating summary not stored, movie %s does not exist", movie_id)
        return

    logger.debug("Movie %s rating summary: average=%s total=%s", movie_id, average_rating, total_reviews)


def recompute_all_movie_ratings(movie_ids=None):
    """ Recompute the rating summary of every movie, or only of movie_ids

        Returns the number of movies processed.
    """
    if movie_ids is None:
        movie_ids = list(Movie.objects.values_list('movie_id', flat=True))

    count = 0
    for movie_id in movie_ids:
        recompute_movie_rating(movie_id)
        count += 1
    return count


def refresh_helpful_counts(review_ids):
    """ Rewrite helpful_count as the current size of each review's voter set """
    for review_id in review_ids:
        voters = Review.helpful_voters.through.objects.filter(review_id=review_id).count()
        Review.objects.filter(pk=review_id).update(helpful_count=voters)


def genre_names():
    """ Sorted names of the genres currently used by at least one movie, cached for 1 hour """
    names = cache.get(GENRES_CACHE_KEY)
    if names is None:
        names = list(
            Movie.genres.through.objects
            .values_list('genre__name', flat=True)
            .distinct()
            .order_by('genre__name')
        )
        cache.set(GENRES_CACHE_KEY, names, timeout=60 * 60)
    return names


def invalidate_genre_cache():
    """ Function to invalidate the cached genre list """
    cache.delete(GENRES_CACHE_KEY)
