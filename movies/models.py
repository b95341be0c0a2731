from django.db import models
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator, MaxValueValidator, MinLengthValidator
from decimal import Decimal
import uuid


# Derived from the reviews of a movie, see movies.utils.recompute_movie_rating
SUMMARY_FIELDS = ('average_rating', 'total_reviews')


class User(AbstractUser):
    """User model extending Django's AbstractUser, admins are staff users"""
    user_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    profile_picture = models.URLField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return f"{self.username} ({self.email})"


class Genre(models.Model):
    """Genre tag, created on demand when a movie is written"""
    genre_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Movie(models.Model):
    """Model for movies

        average_rating and total_reviews are derived from the movie's reviews
        and only ever written by movies.utils.recompute_movie_rating. Saving an
        existing movie leaves both columns as they are in the database
    """
    movie_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    genres = models.ManyToManyField(Genre, related_name='movies')
    release_year = models.PositiveSmallIntegerField(validators=[MinValueValidator(1900)])
    director = models.CharField(max_length=255)
    cast = models.JSONField(default=list, blank=True, help_text="List of {name, character} objects")
    synopsis = models.TextField(max_length=2000)
    poster_url = models.URLField(max_length=500, blank=True, default='')
    trailer_url = models.URLField(max_length=500, blank=True, default='')
    duration = models.PositiveIntegerField(validators=[MinValueValidator(1)], help_text="Duration in minutes")
    tmdb_id = models.CharField(max_length=20, unique=True, null=True, blank=True)
    average_rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal('0.0'),
        validators=[MinValueValidator(0), MaxValueValidator(5)]
    )
    total_reviews = models.PositiveIntegerField(default=0)
    added_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='added_movies')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        """ Never write back the rating summary loaded with an existing movie,
            a review may have changed it since
        """
        if not self._state.adding and kwargs.get('update_fields') is None and not kwargs.get('force_insert'):
            kwargs['update_fields'] = [
                field.name for field in self._meta.concrete_fields
                if not field.primary_key and field.name not in SUMMARY_FIELDS
            ]
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.title} ({self.release_year})"


class Review(models.Model):
    """Model for user reviews of movies"""
    review_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='reviews')
    movie = models.ForeignKey(Movie, on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    review_text = models.TextField(max_length=2000, validators=[MinLengthValidator(10)])
    helpful_voters = models.ManyToManyField(User, blank=True, related_name='helpful_reviews')
    # Always the size of helpful_voters, rewritten by the m2m_changed receiver in signals.py
    helpful_count = models.PositiveIntegerField(default=0, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Rating as last read from or written to the database
    _saved_rating = None

    class Meta:
        # One row per user/movie: a user can only review a movie once
        unique_together = ('user', 'movie')
        ordering = ['-created_at']

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        if 'rating' in field_names:
            instance._saved_rating = instance.rating
        return instance

    @property
    def rating_changed(self):
        return self.rating != self._saved_rating

    def __str__(self):
        return f"{self.user.username} rated {self.movie.title} with {self.rating}"


class WatchlistEntry(models.Model):
    """Model for a movie on a user's watchlist"""
    entry_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='watchlist')
    movie = models.ForeignKey(Movie, on_delete=models.CASCADE, related_name='watchlisted_by')
    date_added = models.DateTimeField(auto_now_add=True)

    class Meta:
        # One row per user/movie: a movie is listed at most once per user
        unique_together = ('user', 'movie')
        ordering = ['-date_added']
        verbose_name_plural = 'watchlist entries'

    def __str__(self):
        return f"{self.user.username} listed {self.movie.title} on {self.date_added}"
