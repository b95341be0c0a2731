import django_filters
from .models import Movie, Review


class MovieFilter(django_filters.FilterSet):
    """ Query string filters for the movie list """
    genre = django_filters.CharFilter(field_name='genres__name', lookup_expr='iexact', distinct=True)
    year = django_filters.NumberFilter(field_name='release_year')
    min_rating = django_filters.NumberFilter(field_name='average_rating', lookup_expr='gte')
    max_rating = django_filters.NumberFilter(field_name='average_rating', lookup_expr='lte')

    class Meta:
        model = Movie
        fields = ['genre', 'year', 'min_rating', 'max_rating']


class ReviewFilter(django_filters.FilterSet):
    """ Query string filters for the review list """
    user = django_filters.UUIDFilter(field_name='user__user_id')
    username = django_filters.CharFilter(field_name='user__username', lookup_expr='iexact')
    movie = django_filters.UUIDFilter(field_name='movie__movie_id')
    movie_title = django_filters.CharFilter(field_name='movie__title', lookup_expr='icontains')
    min_rating = django_filters.NumberFilter(field_name='rating', lookup_expr='gte')
    max_rating = django_filters.NumberFilter(field_name='rating', lookup_expr='lte')

    class Meta:
        model = Review
        fields = ['user', 'username', 'movie', 'movie_title', 'rating', 'min_rating', 'max_rating']
