from rest_framework.permissions import IsAuthenticated


class ActiveAccount(IsAuthenticated):
	"""
	Signed-in dashboard account that has not been suspended.
	"""
	message = "Your account has been suspended. Please contact support."

	def has_permission(self, request, view):
		if not super().has_permission(request, view):
			return False
		return not getattr(request.user, "is_blocked", False)
