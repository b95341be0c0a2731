from functools import partial

from django.db import transaction
from django.db.models.signals import post_save, post_delete, pre_delete, m2m_changed
from django.dispatch import receiver
from .models import User, Movie, Review
from .utils import recompute_movie_rating, refresh_helpful_counts, invalidate_genre_cache


@receiver(post_save, sender=Review)
def recalculate_movie_rating_on_save(sender, instance, created, **kwargs):
    """ Signal to update the rating summary of a movie whenever a review is created
        or its rating changes. Text-only edits leave the summary untouched
    """
    if created or instance.rating_changed:
        recompute_movie_rating(instance.movie_id)
    instance._saved_rating = instance.rating


@receiver(post_delete, sender=Review)
def recalculate_movie_rating_on_delete(sender, instance, origin=None, **kwargs):
    """ Signal to update the rating summary of a movie once a review deletion is committed,
        including reviews removed by a user cascade. Nothing to update when the movie
        itself is being deleted
    """
    if isinstance(origin, Movie) or getattr(origin, 'model', None) is Movie:
        return
    transaction.on_commit(partial(recompute_movie_rating, instance.movie_id))


@receiver(m2m_changed, sender=Review.helpful_voters.through)
def sync_helpful_count(sender, instance, action, reverse, pk_set, **kwargs):
    """ Keep helpful_count equal to the size of the voter set, from either side of the relation """
    if action == 'pre_clear' and reverse:
        # pk_set is not provided on clear, remember which reviews the user had voted on
        instance._cleared_review_ids = list(instance.helpful_reviews.values_list('pk', flat=True))
        return

    if action not in ('post_add', 'post_remove', 'post_clear'):
        return

    if not reverse:
        refresh_helpful_counts([instance.pk])
    elif action == 'post_clear':
        refresh_helpful_counts(getattr(instance, '_cleared_review_ids', []))
    else:
        refresh_helpful_counts(pk_set)


@receiver(pre_delete, sender=User)
def remember_helpful_votes(sender, instance, **kwargs):
    """ Deleting a user removes their votes without an m2m_changed signal """
    instance._voted_review_ids = list(instance.helpful_reviews.values_list('pk', flat=True))


@receiver(post_delete, sender=User)
def recount_helpful_votes(sender, instance, **kwargs):
    refresh_helpful_counts(getattr(instance, '_voted_review_ids', []))


@receiver(post_save, sender=Movie)
@receiver(post_delete, sender=Movie)
def invalidate_genres_on_movie_change(sender, instance, **kwargs):
    """ The genre list only shows genres in use, so any movie change may alter it """
    invalidate_genre_cache()


@receiver(m2m_changed, sender=Movie.genres.through)
def invalidate_genres_on_genre_change(sender, action, **kwargs):
    if action in ('post_add', 'post_remove', 'post_clear'):
        invalidate_genre_cache()
