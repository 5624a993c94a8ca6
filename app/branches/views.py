"""
ViewSets for the branches API.

URL Structure:
    /api/v1/branches/                 GET, POST
    /api/v1/branches/{id}/            GET
    /api/v1/branches/{id}/cashbox/    GET
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response

from core.viewset_mixins import ApplicationErrorMixin
from ledger.serializers import CashboxSerializer

from .models import Branch
from .serializers import BranchCreateSerializer, BranchSerializer
from .services import BranchService


@extend_schema_view(
    list=extend_schema(
        operation_id="list_branches",
        summary="List branches",
        tags=["Branches"],
    ),
    retrieve=extend_schema(
        operation_id="get_branch",
        summary="Get branch",
        tags=["Branches"],
    ),
    create=extend_schema(
        operation_id="create_branch",
        summary="Create branch and its cashbox",
        request=BranchCreateSerializer,
        responses={201: BranchSerializer},
        tags=["Branches"],
    ),
)
class BranchViewSet(
    ApplicationErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for branches.

    create:
        Staff only. Creates the branch and its cashbox atomically.
    """

    queryset = Branch.objects.select_related("cashbox").order_by("name")
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated(), IsAdminUser()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == "create":
            return BranchCreateSerializer
        return BranchSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        branch = BranchService.create_branch(**serializer.validated_data)
        branch = BranchService.get_branch(branch.id)
        return Response(BranchSerializer(branch).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="get_branch_cashbox",
        summary="Get branch cashbox",
        responses={200: CashboxSerializer},
        tags=["Branches"],
    )
    @action(detail=True, methods=["get"])
    def cashbox(self, request, pk=None):
        branch = BranchService.get_branch(int(pk))
        return Response(CashboxSerializer(branch.cashbox).data)
