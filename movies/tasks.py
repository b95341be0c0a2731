import logging

from celery import shared_task
from .utils import recompute_all_movie_ratings as recompute_all


logger = logging.getLogger(__name__)


@shared_task
def recompute_all_movie_ratings():
    """Celery task to recompute the rating summary of every movie:
        - Heals summaries left stale when a recompute after a review change failed
        - Safe to run at any time, every recompute writes absolute values
    """
    count = recompute_all()
    logger.info("Recomputed rating summaries for %s movies", count)
    return count
