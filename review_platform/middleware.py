from datetime import datetime
import logging


# Written to REQUEST_LOG_FILE, see LOGGING in settings
logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """A middleware that logs each request once it has been handled, including:
        - The timestamp
        - The user
        - The client IP
        - The method, path and response status
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        # JWT users are only resolved inside the DRF view, so read the user after the response
        user = getattr(request, 'user', None)
        user = user if user is not None and user.is_authenticated else 'Anonymous'
        logger.info(
            "%s - User: %s - IP: %s - %s %s - %s",
            datetime.now().isoformat(timespec='seconds'), user, self.get_client_ip(request),
            request.method, request.path, response.status_code,
        )
        return response

    def get_client_ip(self, request):
        """ Retrieve the client's IP address from the request """
        # x_forwarded_for will look like: "client_ip, proxy1_ip, proxy2_ip"
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')

        if x_forwarded_for:  # Behind a proxy
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')
