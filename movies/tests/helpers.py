from movies.models import User, Movie, Genre, Review


def make_user(username, password="pass", **extra):
    return User.objects.create_user(
        username=username,
        email=extra.pop("email", f"{username}@email.com"),
        password=password,
        **extra
    )


def make_movie(title="Inception", genres=("Action", "Sci-Fi"), release_year=2010, **extra):
    movie = Movie.objects.create(
        title=title,
        release_year=release_year,
        director=extra.pop("director", "Christopher Nolan"),
        synopsis=extra.pop("synopsis", "A thief plants an idea in a dream."),
        duration=extra.pop("duration", 148),
        **extra
    )
    movie.genres.set([Genre.objects.get_or_create(name=name)[0] for name in genres])
    return movie


def make_review(user, movie, rating, review_text="A solid movie, worth watching."):
    return Review.objects.create(user=user, movie=movie, rating=rating, review_text=review_text)
