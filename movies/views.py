import uuid

from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated, AllowAny, IsAdminUser, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from rest_framework.decorators import action
from rest_framework.generics import get_object_or_404
from rest_framework.pagination import PageNumberPagination
from rest_framework.filters import SearchFilter, OrderingFilter

from django.db import IntegrityError, transaction
from django.db.models import Count
from django_filters.rest_framework import DjangoFilterBackend

from .models import User, Movie, Review, WatchlistEntry
from .serializers import (
    UserSerializer, UserProfileSerializer, MovieSerializer, MovieDetailSerializer,
    ReviewSerializer, WatchlistEntrySerializer
)
from .permissions import IsReviewOwner, IsAccountOwnerOrReadOnly
from .filters import MovieFilter, ReviewFilter
from .utils import genre_names


REVIEW_SORT_FIELDS = ['created_at', 'rating', 'helpful_count']

# A movie needs this many reviews before it can be featured
FEATURED_MIN_REVIEWS = 5
FEATURED_LIMIT = 6


class CustomPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = 'limit'
    max_page_size = 50

    def get_paginated_response(self, data):
        return Response({
            'results': data,
            'pagination': {
                'current_page': self.page.number,
                'total_pages': self.page.paginator.num_pages,
                'total_items': self.page.paginator.count,
                'has_next': self.page.has_next(),
                'has_prev': self.page.has_previous(),
            }
        })


class MoviePagination(CustomPagination):
    page_size = 12


class UserViewSet(viewsets.ModelViewSet):
    """ Viewset for User model with watchlist actions

            - Public: signup, profile, watchlist
            - Account owner: update, delete, add to / remove from watchlist
            - Admin: list
    """
    permission_classes = [IsAccountOwnerOrReadOnly]
    pagination_class = CustomPagination
    queryset = User.objects.all().order_by('username')
    serializer_class = UserSerializer

    def get_permissions(self):
        """ Allow unauthenticated access to POST /users/ for signup """
        if self.action == "create":  # signup
            return [AllowAny()]
        if self.action == "list":
            return [IsAuthenticated(), IsAdminUser()]
        if self.action == "me":
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_serializer_class(self):
        """ Other users only see the public profile """
        if self.action == "retrieve":
            return UserProfileSerializer
        return super().get_serializer_class()

    @action(detail=False, methods=['get'])
    def me(self, request):
        """ The authenticated user's own account """
        serializer = self.get_serializer(request.user)
        return Response(serializer.data)

    @action(detail=True, methods=['get', 'post'])
    def watchlist(self, request, pk=None):
        """ List a user's watchlist, newest first, or add a movie to your own """
        user = self.get_object()

        if request.method == 'POST':
            return self._add_to_watchlist(request, user)

        entries = user.watchlist.select_related('movie').prefetch_related('movie__genres')

        page = self.paginate_queryset(entries)
        if page is not None:
            serializer = WatchlistEntrySerializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = WatchlistEntrySerializer(entries, many=True)
        return Response(serializer.data)

    def _add_to_watchlist(self, request, user):
        movie_id = request.data.get('movie_id')
        if not movie_id:
            return Response({"detail": "Movie ID is required"}, status=status.HTTP_400_BAD_REQUEST)

        movie = get_object_or_404(Movie, movie_id=movie_id)

        # Make sure the movie isn't listed twice
        if WatchlistEntry.objects.filter(user=user, movie=movie).exists():
            return Response(
                {"detail": "Movie already in watchlist"},
                status=status.HTTP_400_BAD_REQUEST
            )

        entry = WatchlistEntry.objects.create(user=user, movie=movie)
        serializer = WatchlistEntrySerializer(entry)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path=r'watchlist/(?P<movie_id>[^/.]+)')
    def remove_from_watchlist(self, request, pk=None, movie_id=None):
        """ Remove a movie from your own watchlist """
        user = self.get_object()

        try:
            movie_id = uuid.UUID(movie_id)
        except ValueError:
            movie_id = None

        entry = WatchlistEntry.objects.filter(user=user, movie_id=movie_id).first() if movie_id else None
        if not entry:
            return Response({"detail": "Movie not found in watchlist"}, status=status.HTTP_404_NOT_FOUND)

        entry.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class MovieViewSet(viewsets.ModelViewSet):
    """ Viewset for Movie model with review actions

            - Public: list, retrieve, genres, featured, reviews (GET)
            - Authenticated: reviews (POST)
            - Admin: create, update, delete
    """
    permission_classes = [IsAuthenticated, IsAdminUser]
    pagination_class = MoviePagination
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = MovieFilter
    queryset = Movie.objects.select_related('added_by').prefetch_related('genres')
    serializer_class = MovieSerializer

    # Text search
    search_fields = ['title', 'director', 'genres__name']

    # Sorting
    ordering_fields = ['title', 'release_year', 'average_rating', 'created_at']
    ordering = ['-created_at']

    def get_permissions(self):
        """ Allow unauthenticated access to read movies and their reviews """
        if self.action in ["list", "retrieve", "genres", "featured"]:
            return [AllowAny()]
        if self.action == "reviews":
            return [IsAuthenticatedOrReadOnly()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == "retrieve":
            return MovieDetailSerializer
        return super().get_serializer_class()

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == "retrieve":
            queryset = queryset.prefetch_related('reviews__user')
        return queryset

    def perform_create(self, serializer):
        serializer.save(added_by=self.request.user)

    @action(detail=False, methods=['get'])
    def genres(self, request):
        """ Action to get the sorted names of all genres in use """
        return Response({"genres": genre_names()})

    @action(detail=False, methods=['get'])
    def featured(self, request):
        """ Action to get the highest rated movies among those with enough reviews """
        featured_movies = (
            self.get_queryset()
            .filter(total_reviews__gte=FEATURED_MIN_REVIEWS)
            .order_by('-average_rating', '-total_reviews')[:FEATURED_LIMIT]
        )
        serializer = self.get_serializer(featured_movies, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['get', 'post'], pagination_class=CustomPagination)
    def reviews(self, request, pk=None):
        """ Get the reviews of a movie with its rating distribution, or review it """
        movie = self.get_object()

        if request.method == 'POST':
            return self._create_review(request, movie)

        sort_by = request.query_params.get('sort_by', 'created_at')
        if sort_by not in REVIEW_SORT_FIELDS:
            return Response({"detail": "Invalid sort field"}, status=status.HTTP_400_BAD_REQUEST)
        direction = '' if request.query_params.get('sort_order') == 'asc' else '-'

        reviews = movie.reviews.select_related('user', 'movie').order_by(f'{direction}{sort_by}', '-created_at')
        rating_distribution = list(
            movie.reviews.values('rating').annotate(count=Count('review_id')).order_by('rating')
        )

        page = self.paginate_queryset(reviews)
        if page is not None:
            serializer = ReviewSerializer(page, many=True)
            response = self.get_paginated_response(serializer.data)
            response.data['rating_distribution'] = rating_distribution
            return response

        serializer = ReviewSerializer(reviews, many=True)
        return Response({"results": serializer.data, "rating_distribution": rating_distribution})

    def _create_review(self, request, movie):
        # Make sure the user hasn't reviewed this movie already
        # If so they should do an update in ReviewViewSet, not create
        user = request.user
        if Review.objects.filter(user=user, movie=movie).exists():
            return self._already_reviewed()

        serializer = ReviewSerializer(data=request.data)
        if serializer.is_valid():
            try:
                # Saving triggers the movie rating recompute, see signals.py
                serializer.save(user=user, movie=movie)
            except IntegrityError:
                # A concurrent request stored this user's review after the check above
                return self._already_reviewed()
            return Response(serializer.data, status=status.HTTP_201_CREATED)

        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    def _already_reviewed(self):
        return Response(
            {"detail": "You have already reviewed this movie. Please update your review instead in /reviews/<id>/."},
            status=status.HTTP_400_BAD_REQUEST
        )


class ReviewViewSet(viewsets.ModelViewSet):
    """ Viewset for Review model """
    permission_classes = [IsReviewOwner]
    pagination_class = CustomPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ReviewFilter
    queryset = Review.objects.select_related('user', 'movie')
    serializer_class = ReviewSerializer

    ordering_fields = REVIEW_SORT_FIELDS
    ordering = ['-created_at']

    def create(self, request, *args, **kwargs):
        """ Creating a review is movie specific so it's handled in MovieViewSet reviews action """
        return Response(
            {"detail": "Use /movies/<id>/reviews/ instead to create a review."},
            status=status.HTTP_405_METHOD_NOT_ALLOWED
        )

    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated])
    def helpful(self, request, pk=None):
        """ Toggle the authenticated user's helpful vote on a review """
        review = self.get_object()
        user = request.user

        with transaction.atomic():
            review = Review.objects.select_for_update().get(pk=review.pk)
            already_helpful = review.helpful_voters.filter(pk=user.pk).exists()
            # helpful_count follows the voter set, see signals.sync_helpful_count
            if already_helpful:
                review.helpful_voters.remove(user)
            else:
                review.helpful_voters.add(user)

        review.refresh_from_db(fields=['helpful_count'])
        return Response({
            "message": "Removed from helpful" if already_helpful else "Marked as helpful",
            "helpful": not already_helpful,
            "helpful_count": review.helpful_count,
        })
