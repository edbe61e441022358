"""
Local SEO rules (5 points). All of them are advisory: a site that is not a
local business keeps full weight and only gets info issues.
"""
import re

from seoaudit.models.audit import AuditRuleContext, IssueSeverity, RuleCategory, RuleCheckResult
from seoaudit.rules.base import AuditRule
from seoaudit.services.extractor import iter_json_ld_nodes, schema_types, visible_text

PHONE_RE = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
ADDRESS_KEYWORDS = ("street", "avenue", "road", "suite", "floor", "building")
BUSINESS_PROFILE_HOSTS = ("google.com/maps", "g.page", "business.google.com")


def _is_business_node(node: dict) -> bool:
    return any("Business" in t or t == "Organization" for t in schema_types(node))


class NapConsistencyRule(AuditRule):
    id = "local-nap"
    category = RuleCategory.LOCAL_SEO
    name = "NAP Consistency"
    description = "Check for consistent Name, Address, Phone information"
    weight = 2

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        text = visible_text(context.soup)
        lowered = text.lower()

        schema_address = False
        schema_phone = False
        for node in iter_json_ld_nodes(context.page.json_ld_data):
            if _is_business_node(node):
                schema_address = schema_address or bool(node.get("address"))
                schema_phone = schema_phone or bool(node.get("telephone"))

        nap_found = {
            "phone": PHONE_RE.search(text) is not None,
            "address": any(keyword in lowered for keyword in ADDRESS_KEYWORDS),
            "schema_address": schema_address,
            "schema_phone": schema_phone,
        }

        if all(nap_found.values()):
            return self.passed()

        if not nap_found["phone"] and not nap_found["address"]:
            return self.passed(
                self.issue(
                    IssueSeverity.INFO,
                    "No NAP (Name, Address, Phone) information detected",
                    "If this is a local business, add your contact information prominently and in LocalBusiness schema.",
                    **nap_found,
                )
            )

        missing = [key.replace("_", " ") for key, found in nap_found.items() if not found]
        return self.partial(
            0.5,
            False,
            self.issue(
                IssueSeverity.INFO,
                f"Incomplete NAP information. Missing: {', '.join(missing)}",
                "Add complete NAP (Name, Address, Phone) information in both visible text and "
                "LocalBusiness schema for better local SEO.",
                **nap_found,
            ),
        )


class GoogleMapsRule(AuditRule):
    id = "local-google-maps"
    category = RuleCategory.LOCAL_SEO
    name = "Google Maps Embed"
    description = "Detect embedded Google Maps on the page"
    weight = 2

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        has_map = any(
            "google.com/maps" in (iframe.get("src") or "")
            for iframe in context.soup.find_all("iframe")
        )
        if has_map:
            return self.passed()

        has_geo = any(
            node.get("geo") or (isinstance(node.get("address"), dict) and node["address"].get("geo"))
            for node in iter_json_ld_nodes(context.page.json_ld_data)
        )
        if has_geo:
            return self.partial(
                0.7,
                True,
                self.issue(
                    IssueSeverity.INFO,
                    "Geo coordinates found in schema but no embedded map",
                    "Consider adding an embedded Google Map for better user experience on your contact/location page.",
                ),
            )

        return self.passed(
            self.issue(
                IssueSeverity.INFO,
                "No Google Maps embed detected",
                "If this is a local business, consider embedding a Google Map on your contact page "
                "to help customers find you.",
            )
        )


class BusinessProfileRule(AuditRule):
    id = "local-business-profile"
    category = RuleCategory.LOCAL_SEO
    name = "Google Business Profile"
    description = "Check for Google Business Profile or Maps links"
    weight = 1

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        has_profile_link = any(
            host in a["href"]
            for a in context.soup.find_all("a", href=True)
            for host in BUSINESS_PROFILE_HOSTS
        )
        if has_profile_link:
            return self.passed()

        return self.passed(
            self.issue(
                IssueSeverity.INFO,
                "No Google Business Profile link found",
                "If you have a Google Business Profile, link to it from your website. "
                "This can improve local search visibility.",
            )
        )
