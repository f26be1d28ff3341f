X_TENANT_REF = "#/components/parameters/X-Tenant"


def add_x_tenant_parameter(result, generator, request, public):
    """Document the X-Tenant header (tenant slug) on every operation."""
    components = result.setdefault("components", {})
    components.setdefault("parameters", {})["X-Tenant"] = {
        "name": "X-Tenant",
        "in": "header",
        "description": "Tenant slug. Optional when the authenticated user belongs to a tenant.",
        "required": False,
        "schema": {"type": "string"},
    }

    for path_item in result.get("paths", {}).values():
        for operation in path_item.values():
            if not isinstance(operation, dict):
                continue
            parameters = operation.setdefault("parameters", [])
            already_there = any(
                p.get("$ref") == X_TENANT_REF or p.get("name") == "X-Tenant"
                for p in parameters
            )
            if not already_there:
                parameters.append({"$ref": X_TENANT_REF})

    return result
