from datetime import date

from django.core.validators import RegexValidator
from rest_framework import serializers
from .models import User, Movie, Genre, Review, WatchlistEntry, SUMMARY_FIELDS


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the authenticated user's own account"""
    username = serializers.CharField(
        required=True,
        min_length=3,
        max_length=30,
        validators=[RegexValidator(
            r'^[a-zA-Z0-9_]+$',
            "Username can only contain letters, numbers, and underscores"
        )]
    )
    password = serializers.CharField(write_only=True, required=True, min_length=6)

    class Meta:
        model = User
        fields = ['user_id', 'username', 'email', 'password', 'profile_picture', 'is_staff', 'date_joined']
        read_only_fields = ['is_staff', 'date_joined']

    def get_fields(self):
        fields = super().get_fields()
        # Profile edits keep the current password unless a new one is sent
        if self.instance is not None:
            fields['password'].required = False
        return fields

    def validate_username(self, value):
        """ The explicit field above drops the model's unique validator """
        users = User.objects.filter(username__iexact=value)
        if self.instance is not None:
            users = users.exclude(pk=self.instance.pk)
        if users.exists():
            raise serializers.ValidationError("Username already taken")
        return value

    # Override create and update to handle password hashing
    def create(self, validated_data):
        """ Create user with hashed password by explicitly using set_password
            otherwise password would be stored in plain text
        """
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)  # hash password
        user.save()
        return user

    def update(self, instance, validated_data):
        """Update user and hash password if it's being updated"""
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)  # hash password
        instance.save()
        return instance


class UserSummarySerializer(serializers.ModelSerializer):
    """Public fields of a user, nested in reviews"""

    class Meta:
        model = User
        fields = ['user_id', 'username', 'profile_picture']


class MovieSummarySerializer(serializers.ModelSerializer):
    """Short form of a movie, nested in reviews and watchlists"""
    genres = serializers.StringRelatedField(many=True, read_only=True)

    class Meta:
        model = Movie
        fields = ['movie_id', 'title', 'poster_url', 'release_year', 'genres', 'average_rating', 'total_reviews']


class GenreListField(serializers.ListField):
    """Genre tags written as a list of names, read back from the related Genre rows"""
    child = serializers.CharField(max_length=100)

    def to_representation(self, data):
        return [genre.name for genre in data.all()]


class CastMemberSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    character = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class MovieSerializer(serializers.ModelSerializer):
    """Serializer for Movie model"""
    genres = GenreListField(allow_empty=False)
    cast = CastMemberSerializer(many=True, required=False)
    added_by = serializers.ReadOnlyField(source='added_by.username')

    class Meta:
        model = Movie
        fields = ['movie_id', 'title', 'genres', 'release_year', 'director', 'cast', 'synopsis',
                  'poster_url', 'trailer_url', 'duration', 'tmdb_id', 'average_rating',
                  'total_reviews', 'added_by', 'created_at']
        # Derived from the reviews, see utils.recompute_movie_rating
        read_only_fields = ['average_rating', 'total_reviews', 'created_at']

    def validate_release_year(self, value):
        """ Ensure the release year is between 1900 and five years from now """
        latest = date.today().year + 5
        if not (1900 <= value <= latest):
            raise serializers.ValidationError(f"Release year must be between 1900 and {latest}")
        return value

    def validate_genres(self, value):
        """ Strip and de-duplicate genre names, keeping their order """
        names = []
        for name in value:
            name = name.strip()
            if name and name not in names:
                names.append(name)
        if not names:
            raise serializers.ValidationError("At least one genre is required")
        return names

    def validate_tmdb_id(self, value):
        # Blank ids are stored as NULL so they don't collide on the unique constraint
        return value or None

    def validate(self, attrs):
        """ Reject a movie that already exists, by title and year or by TMDb id """
        if self.instance is None:
            duplicate = Movie.objects.filter(
                title__iexact=attrs.get('title'),
                release_year=attrs.get('release_year')
            )
            if attrs.get('tmdb_id'):
                duplicate = duplicate | Movie.objects.filter(tmdb_id=attrs['tmdb_id'])
            if duplicate.exists():
                raise serializers.ValidationError({"detail": "Movie already exists"})
        return attrs

    def create(self, validated_data):
        genres = validated_data.pop('genres')
        validated_data['cast'] = [dict(member) for member in validated_data.get('cast', [])]
        movie = Movie.objects.create(**validated_data)
        self._set_genres(movie, genres)
        return movie

    def update(self, instance, validated_data):
        genres = validated_data.pop('genres', None)
        if 'cast' in validated_data:
            validated_data['cast'] = [dict(member) for member in validated_data['cast']]
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        # Answer with the summary as it is now, not as it was loaded
        instance.refresh_from_db(fields=SUMMARY_FIELDS)
        if genres is not None:
            self._set_genres(instance, genres)
        return instance

    def _set_genres(self, movie, names):
        genres = [Genre.objects.get_or_create(name=name)[0] for name in names]
        movie.genres.set(genres)


class ReviewSerializer(serializers.ModelSerializer):
    """Serializer for Review model"""
    user = UserSummarySerializer(read_only=True)
    movie_id = serializers.ReadOnlyField(source='movie.movie_id')
    movie_title = serializers.ReadOnlyField(source='movie.title')

    class Meta:
        model = Review
        fields = ['review_id', 'user', 'movie_id', 'movie_title', 'rating', 'review_text',
                  'helpful_count', 'created_at', 'updated_at']
        read_only_fields = ['helpful_count', 'created_at', 'updated_at']

    def validate_rating(self, value):
        """Ensure the rating is between 1 and 5 stars"""
        if not (1 <= value <= 5):
            raise serializers.ValidationError("Rating must be between 1 and 5")
        return value

    def validate_review_text(self, value):
        if not (10 <= len(value) <= 2000):
            raise serializers.ValidationError("Review text must be between 10 and 2000 characters")
        return value


class MovieDetailSerializer(MovieSerializer):
    """Movie with its reviews, newest first"""
    reviews = ReviewSerializer(many=True, read_only=True)

    class Meta(MovieSerializer.Meta):
        fields = MovieSerializer.Meta.fields + ['reviews']


class UserReviewSerializer(serializers.ModelSerializer):
    """A review as listed on its author's profile"""
    movie = MovieSummarySerializer(read_only=True)

    class Meta:
        model = Review
        fields = ['review_id', 'movie', 'rating', 'review_text', 'helpful_count', 'created_at']


class UserProfileSerializer(serializers.ModelSerializer):
    """Public profile of a user and their review history"""
    review_count = serializers.SerializerMethodField()
    watchlist_count = serializers.SerializerMethodField()
    recent_reviews = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['user_id', 'username', 'profile_picture', 'date_joined',
                  'review_count', 'watchlist_count', 'recent_reviews']

    def get_review_count(self, obj):
        return obj.reviews.count()

    def get_watchlist_count(self, obj):
        return obj.watchlist.count()

    def get_recent_reviews(self, obj):
        reviews = obj.reviews.select_related('movie').order_by('-created_at')[:10]
        return UserReviewSerializer(reviews, many=True).data


class WatchlistEntrySerializer(serializers.ModelSerializer):
    """Serializer for WatchlistEntry model"""
    movie = MovieSummarySerializer(read_only=True)

    class Meta:
        model = WatchlistEntry
        fields = ['entry_id', 'movie', 'date_added']
