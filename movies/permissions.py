from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsReviewOwner(BasePermission):
    """ Custom permission for Review """

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True

        # Creating, editing, deleting or voting requires an authenticated user
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        # Read permissions are allowed to any request
        if request.method in SAFE_METHODS:
            return True

        if request.method in ('PUT', 'PATCH'):
            # Admins can't edit users reviews to avoid disputes and rating manipulation
            # Write permissions are only allowed to the author of the review
            return obj.user == request.user

        # Delete permissions are only allowed to the author or admins
        return obj.user == request.user or request.user.is_staff


class IsAccountOwnerOrReadOnly(BasePermission):
    """ Custom permission for User: profiles and watchlists are public,
        only the account owner can change them
    """

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return obj == request.user
