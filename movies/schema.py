import graphene
from graphene_django import DjangoObjectType
from .models import Movie, Review, WatchlistEntry, User
from django.db.models import Q


# Fields a client may sort movies by, optionally prefixed with "-"
MOVIE_ORDERING_FIELDS = {'title', 'release_year', 'average_rating', 'total_reviews', 'created_at'}
DEFAULT_LIMIT = 20
MAX_LIMIT = 50


def page_window(limit, offset):
    """ Clamp limit to 0..MAX_LIMIT and offset to 0 or more, an explicit null takes the default """
    limit = DEFAULT_LIMIT if limit is None else limit
    offset = 0 if offset is None else offset
    return max(0, min(limit, MAX_LIMIT)), max(0, offset)


# ────────────── TYPES ──────────────

class UserType(DjangoObjectType):
    class Meta:
        model = User
        fields = ["user_id", "username", "profile_picture", "date_joined"]


class ReviewType(DjangoObjectType):
    class Meta:
        model = Review
        fields = ["review_id", "rating", "review_text", "helpful_count", "created_at", "user", "movie"]


class MovieType(DjangoObjectType):
    genres = graphene.List(graphene.String)
    average_rating = graphene.Float()
    # All reviews of this movie, newest first
    reviews = graphene.List(ReviewType)
    # The review the current logged in user wrote for this movie
    my_review = graphene.Field(ReviewType)
    # Whether this movie is on the current user's watchlist
    in_my_watchlist = graphene.Boolean()

    class Meta:
        model = Movie
        fields = ["movie_id", "title", "release_year", "director", "synopsis", "poster_url",
                  "trailer_url", "duration", "total_reviews", "created_at"]

    def resolve_genres(self, info):
        return [genre.name for genre in self.genres.all()]

    def resolve_average_rating(self, info):
        return float(self.average_rating)

    def resolve_reviews(self, info):
        return self.reviews.select_related('user').all()

    def resolve_my_review(self, info):
        user = info.context.user
        if user.is_anonymous:
            return None
        return Review.objects.filter(user=user, movie=self).first()

    def resolve_in_my_watchlist(self, info):
        user = info.context.user
        if user.is_anonymous:
            return False
        return WatchlistEntry.objects.filter(user=user, movie=self).exists()


# ────────────── LIST TYPES ──────────────

class MovieListType(graphene.ObjectType):
    items = graphene.List(MovieType)
    total_count = graphene.Int()
    limit = graphene.Int()
    offset = graphene.Int()


class ReviewListType(graphene.ObjectType):
    items = graphene.List(ReviewType)
    total_count = graphene.Int()
    limit = graphene.Int()
    offset = graphene.Int()


# ────────────── QUERY ──────────────

class Query(graphene.ObjectType):
    movies = graphene.Field(
        MovieListType,
        genre=graphene.String(required=False),  # Optional filter by genre name
        search=graphene.String(),
        min_rating=graphene.Float(),
        limit=graphene.Int(),
        offset=graphene.Int(),
        order_by=graphene.String(),  # e.g. "-average_rating"
    )

    movie = graphene.Field(
        MovieType,
        movie_id=graphene.UUID(required=True)
    )

    me = graphene.Field(UserType)

    reviews = graphene.Field(
        ReviewListType,
        user_id=graphene.UUID(required=False),
        movie_id=graphene.UUID(required=False),
        limit=graphene.Int(),
        offset=graphene.Int()
    )

    # ────────── RESOLVERS ──────────

    def resolve_movies(self, info, genre=None, search=None, min_rating=None,
                       limit=DEFAULT_LIMIT, offset=0, order_by=None):
        """ Return all movies
            - Filter by genre name, by text in the title, director or genres, by minimum rating
            - Sort by one of MOVIE_ORDERING_FIELDS, newest first by default
        """
        qs = Movie.objects.prefetch_related('genres')

        if genre:
            qs = qs.filter(genres__name__iexact=genre)
        if search:
            qs = qs.filter(
                Q(title__icontains=search) | Q(director__icontains=search) | Q(genres__name__icontains=search)
            ).distinct()
        if min_rating is not None:
            qs = qs.filter(average_rating__gte=min_rating)
        if order_by:
            if order_by.lstrip('-') not in MOVIE_ORDERING_FIELDS:
                raise ValueError(f"Cannot order movies by '{order_by}'")
            qs = qs.order_by(order_by)

        limit, offset = page_window(limit, offset)
        total_count = qs.count()
        qs = qs[offset:offset+limit]

        return MovieListType(
            items=qs,
            total_count=total_count,
            limit=limit,
            offset=offset
        )

    def resolve_movie(self, info, movie_id):
        """ Return a single movie by ID, or null when it doesn't exist """
        return Movie.objects.filter(movie_id=movie_id).first()

    def resolve_me(self, info):
        """ return the current authenticated user """
        user = info.context.user
        if user.is_anonymous:
            return None
        return user

    def resolve_reviews(self, info, user_id=None, movie_id=None, limit=DEFAULT_LIMIT, offset=0):
        """ Return all reviews, newest first
            - filter by user_id to get all reviews of a user
            - filter by movie_id to get all reviews for a movie
        """
        qs = Review.objects.select_related('user', 'movie')

        if user_id:
            qs = qs.filter(user__user_id=user_id)
        if movie_id:
            qs = qs.filter(movie__movie_id=movie_id)

        limit, offset = page_window(limit, offset)
        total_count = qs.count()
        qs = qs[offset:offset+limit]

        return ReviewListType(
            items=qs,
            total_count=total_count,
            limit=limit,
            offset=offset
        )


schema = graphene.Schema(query=Query)
