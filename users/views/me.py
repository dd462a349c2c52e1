# users/views/me.py

from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.responses import ok
from permissions.roles import effective_capabilities_for

# ---------------------------
# SERIALIZER
# ---------------------------


class MeSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    role = serializers.CharField()
    business_id = serializers.UUIDField(allow_null=True)
    business_name = serializers.CharField(allow_null=True)
    capabilities = serializers.ListField(child=serializers.CharField())


# ---------------------------
# VIEW
# ---------------------------


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    @extend_schema(
        responses={200: MeSerializer},
        description="Current user, tenant and effective capabilities",
    )
    def get(self, request):
        user = request.user
        business = getattr(user, "business", None)

        payload = MeSerializer(
            {
                "id": user.id,
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "role": user.role,
                "business_id": getattr(business, "id", None),
                "business_name": getattr(business, "name", None),
                "capabilities": sorted(effective_capabilities_for(request, user)),
            }
        ).data

        return ok({"user": payload})
