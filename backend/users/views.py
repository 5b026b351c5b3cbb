from rest_framework import generics, permissions

from .serializers import UserDetailSerializer


class UserDetailAPIView(generics.RetrieveAPIView):
    """GET: the authenticated account and its classroom access."""
    serializer_class = UserDetailSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user

user_detail_view = UserDetailAPIView.as_view()
