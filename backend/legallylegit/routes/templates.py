"""Template Routes

- GET /api/templates - Template catalogue and jurisdictions
- GET /api/templates/{template_id} - One template with its optional clauses
"""

from fastapi import APIRouter

from legallylegit.models.templates import FIELD_LABELS, JURISDICTIONS, TEMPLATES, get_template
from legallylegit.routes.errors import not_found

router = APIRouter(prefix="/api/templates", tags=["Templates"])


@router.get("")
async def list_templates():
    """No auth required; drives the template picker."""
    return {
        "templates": [t.model_dump() for t in TEMPLATES],
        "jurisdictions": JURISDICTIONS,
    }


@router.get("/{template_id}")
async def get_template_detail(template_id: str):
    template = get_template(template_id)
    if template is None:
        raise not_found(f"Template '{template_id}' not found")
    return {
        **template.model_dump(),
        "field_labels": {f: FIELD_LABELS.get(f, f) for f in template.fields},
        "jurisdictions": JURISDICTIONS,
    }
