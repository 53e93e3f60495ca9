# Overview: Flask API routes for employee records.

from flask import Blueprint, g, request

from ..decorators import require_auth, require_capability
from ..models import Employee
from ..responses import paginated_response, success_response
from ..services import employee_service
from ..services.employee_service import EMPLOYEE_POLICY
from ..validation import json_object, parse_pagination, validate_payload

employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@employees_bp.get("")
@require_auth
@require_capability("employees", "read")
def list_employees():
    page, limit = parse_pagination(request.args)
    result = employee_service.list_employees(
        g.tenant_id,
        search=request.args.get("search"),
        department=request.args.get("department"),
        status=request.args.get("status"),
        page=page,
        limit=limit,
    )
    return paginated_response(result)


@employees_bp.get("/stats")
@require_auth
@require_capability("employees", "read")
def stats():
    return success_response(employee_service.employee_stats(g.tenant_id))


@employees_bp.get("/<employee_id>")
@require_auth
@require_capability("employees", "read")
def get_employee(employee_id: str):
    return success_response(employee_service.get_employee(g.tenant_id, employee_id).to_dict())


@employees_bp.post("")
@require_auth
@require_capability("employees", "create")
def create_employee():
    payload = json_object(request)
    patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=False)
    employee = employee_service.create_employee(g.tenant_id, patch)
    return success_response(employee.to_dict(), message="Employee created successfully", status=201)


@employees_bp.put("/<employee_id>")
@require_auth
@require_capability("employees", "update")
def update_employee(employee_id: str):
    employee = employee_service.get_employee(g.tenant_id, employee_id)
    payload = json_object(request)
    patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=True)
    employee = employee_service.update_employee(employee, patch)
    return success_response(employee.to_dict(), message="Employee updated successfully")


@employees_bp.delete("/<employee_id>")
@require_auth
@require_capability("employees", "delete")
def delete_employee(employee_id: str):
    employee = employee_service.get_employee(g.tenant_id, employee_id)
    employee_service.delete_employee(employee)
    return success_response(message="Employee deleted successfully")
