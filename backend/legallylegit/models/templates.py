"""Document Template Models

Built-in Australian legal document templates. Templates are immutable and
defined at import time.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Mapping, Optional
from enum import Enum


class TemplateRiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OptionalClause(BaseModel):
    """Clause a user may opt into; ``content`` is merged into the document"""
    clause_id: str
    title: str
    description: str
    content: str

    model_config = {"extra": "ignore", "frozen": True}


class Template(BaseModel):
    """Document template definition"""
    template_id: str
    title: str
    description: str
    urgency: str
    risk_tier: TemplateRiskTier
    compliance_requirements: List[str] = Field(default_factory=list)
    fields: List[str]
    highlight: bool = False
    optional_clauses: List[OptionalClause] = Field(default_factory=list)

    model_config = {"extra": "ignore", "frozen": True}

    def get_clause(self, clause_id: str) -> Optional[OptionalClause]:
        return next((c for c in self.optional_clauses if c.clause_id == clause_id), None)


JURISDICTIONS = [
    "New South Wales",
    "Victoria",
    "Queensland",
    "Western Australia",
    "South Australia",
    "Tasmania",
    "ACT",
    "Northern Territory",
]

FIELD_LABELS: Dict[str, str] = {
    "businessName": "Business Legal Name",
    "abn": "ABN/ACN",
    "employeeName": "Employee Full Name",
    "position": "Position Title",
    "startDate": "Start Date",
    "salary": "Salary/Wage (per annum or hour)",
    "workLocation": "Primary Work Location",
    "employmentType": "Employment Type (Full-time, Part-time, Casual)",
    "awardClassification": "Modern Award & Classification (if any)",
    "contractorName": "Contractor Name/Company",
    "contractorAbn": "Contractor ABN",
    "services": "Description of Services",
    "term": "Agreement Term or End Date",
    "fees": "Fees & Payment Schedule",
    "intellectualProperty": "Intellectual Property Ownership",
    "clientName": "Client Name",
    "paymentTerms": "Payment Terms (e.g., 14 days)",
    "limitationOfLiability": "Limitation of Liability Amount",
    "websiteUrl": "Website URL",
    "dataCollected": "Types of Data Collected",
    "dataUsage": "How Data is Used",
    "contactEmail": "Privacy Officer Contact Email",
    "jurisdiction": "Governing Law (e.g., New South Wales)",
    "disclosingParty": "Disclosing Party Name",
    "receivingParty": "Receiving Party Name",
    "effectiveDate": "Effective Date",
    "confidentialInformation": "Definition of Confidential Information",
}


# ============================================================================
# Optional Clause Catalogue
# ============================================================================

_RESTRAINT_OF_TRADE = OptionalClause(
    clause_id="restraint-of-trade",
    title="Restraint of Trade",
    description="Limits the worker from competing or soliciting clients after the engagement ends.",
    content=(
        "For a period of 6 months after the end of this agreement, the Worker must not, within the "
        "metropolitan area in which the Business operates, solicit or accept work from any client of the "
        "Business with whom the Worker dealt in the 12 months before the end of this agreement."
    ),
)

_CONFIDENTIALITY = OptionalClause(
    clause_id="confidentiality",
    title="Confidentiality",
    description="Protects business information disclosed during the engagement.",
    content=(
        "The Worker must keep confidential all information of the Business that is not publicly available "
        "and must not use or disclose it except to perform this agreement or as required by law."
    ),
)

_IP_ASSIGNMENT = OptionalClause(
    clause_id="ip-assignment",
    title="Intellectual Property Assignment",
    description="Assigns ownership of all work product to the business on creation.",
    content=(
        "All intellectual property rights in material created in performing the services vest in the "
        "Business on creation, and the Contractor assigns those rights to the Business."
    ),
)

_LATE_PAYMENT = OptionalClause(
    clause_id="late-payment-interest",
    title="Late Payment Interest",
    description="Charges interest on overdue invoices.",
    content=(
        "Overdue amounts accrue interest at 2% per annum above the Reserve Bank of Australia cash rate, "
        "calculated daily from the due date until paid in full."
    ),
)

_OVERSEAS_DISCLOSURE = OptionalClause(
    clause_id="overseas-disclosure",
    title="Overseas Disclosure",
    description="Discloses that personal information may be sent to overseas recipients (APP 8).",
    content=(
        "We may disclose personal information to service providers located outside Australia. We take "
        "reasonable steps to ensure those recipients handle the information in accordance with the "
        "Australian Privacy Principles."
    ),
)

_RETURN_OF_MATERIALS = OptionalClause(
    clause_id="return-of-materials",
    title="Return of Materials",
    description="Requires the receiving party to return or destroy confidential material on request.",
    content=(
        "On written request, the Receiving Party must promptly return or destroy all documents and copies "
        "containing Confidential Information and confirm in writing that it has done so."
    ),
)


# ============================================================================
# Template Catalogue
# ============================================================================

TEMPLATES: List[Template] = [
    Template(
        template_id="employment",
        title="Employment Contract",
        description="Avoid Fair Work fines with compliant contracts for full-time, part-time, or casual staff.",
        urgency="Avoid $66,600 Fair Work fines",
        risk_tier=TemplateRiskTier.HIGH,
        compliance_requirements=["Fair Work Act 2009", "Modern Awards", "NES"],
        fields=["businessName", "abn", "employeeName", "position", "startDate", "salary",
                "workLocation", "employmentType", "awardClassification"],
        highlight=True,
        optional_clauses=[_CONFIDENTIALITY, _RESTRAINT_OF_TRADE],
    ),
    Template(
        template_id="contractor",
        title="Independent Contractor Agreement",
        description="Clearly define your relationship with contractors to avoid sham contracting risks.",
        urgency="Critical for ATO/FWO compliance",
        risk_tier=TemplateRiskTier.HIGH,
        compliance_requirements=["ATO Guidelines", "Independent Contractors Act 2006"],
        fields=["businessName", "abn", "contractorName", "contractorAbn", "services", "term",
                "fees", "intellectualProperty"],
        highlight=True,
        optional_clauses=[_IP_ASSIGNMENT, _CONFIDENTIALITY, _RESTRAINT_OF_TRADE],
    ),
    Template(
        template_id="service",
        title="Client Service Agreement",
        description="Set clear expectations for service delivery, payment terms, and liability.",
        urgency="Essential for service-based businesses",
        risk_tier=TemplateRiskTier.MEDIUM,
        compliance_requirements=["Australian Consumer Law (ACL)"],
        fields=["businessName", "abn", "clientName", "services", "fees", "paymentTerms", "term",
                "limitationOfLiability"],
        optional_clauses=[_LATE_PAYMENT, _IP_ASSIGNMENT],
    ),
    Template(
        template_id="privacy",
        title="Privacy Policy",
        description="Comply with the Privacy Act 1988 by informing users how you handle their data.",
        urgency="Required for most online businesses",
        risk_tier=TemplateRiskTier.HIGH,
        compliance_requirements=["Privacy Act 1988", "APPs"],
        fields=["businessName", "websiteUrl", "dataCollected", "dataUsage", "contactEmail"],
        highlight=True,
        optional_clauses=[_OVERSEAS_DISCLOSURE],
    ),
    Template(
        template_id="website-terms",
        title="Website Terms of Use",
        description="Protect your intellectual property and limit your liability for your website content.",
        urgency="Protects your online assets",
        risk_tier=TemplateRiskTier.MEDIUM,
        compliance_requirements=["Copyright Act 1968", "ACL"],
        fields=["businessName", "websiteUrl", "jurisdiction", "limitationOfLiability", "intellectualProperty"],
    ),
    Template(
        template_id="nda",
        title="Non-Disclosure Agreement",
        description="Protect your confidential business information when sharing it with others.",
        urgency="Critical when sharing secrets",
        risk_tier=TemplateRiskTier.MEDIUM,
        compliance_requirements=["Contract Law"],
        fields=["disclosingParty", "receivingParty", "effectiveDate", "confidentialInformation", "term"],
        optional_clauses=[_RETURN_OF_MATERIALS],
    ),
]

_TEMPLATES_BY_ID = {t.template_id: t for t in TEMPLATES}


def get_template(template_id: str) -> Optional[Template]:
    return _TEMPLATES_BY_ID.get(template_id)


def validate_form_data(template: Template, form_data: Mapping[str, str]) -> Dict[str, str]:
    """Return field errors keyed by field; empty when the form is complete.

    Every template field must be present and non-blank, and no key may fall
    outside the template's fields.
    """
    errors: Dict[str, str] = {}
    for field in template.fields:
        value = form_data.get(field)
        if value is None or not str(value).strip():
            errors[field] = f"{FIELD_LABELS.get(field, field)} is required."
    for key in form_data:
        if key not in template.fields:
            errors[key] = f"{key} is not a field of {template.title}."
    return errors
