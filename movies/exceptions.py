from rest_framework import status
from rest_framework.exceptions import APIException


class PersistenceError(APIException):
    """The store was unreachable or rejected a write

        Raised when a movie's rating aggregate could not be recomputed.
        The review write that triggered it is already committed.
    """
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'The movie rating summary could not be updated.'
    default_code = 'persistence_failure'
