"""
Structured data rules (20 points): JSON-LD presence and the shape of the
common schema.org entities.

The entity rules are optional: a page without the entity scores full weight.
"""
from seoaudit.models.audit import AuditRuleContext, IssueSeverity, RuleCategory, RuleCheckResult
from seoaudit.rules.base import AuditRule
from seoaudit.services.extractor import find_schema, iter_json_ld_nodes, schema_types


class JsonLdRule(AuditRule):
    id = "schema-jsonld"
    category = RuleCategory.STRUCTURED_DATA
    name = "JSON-LD Detection"
    description = "Detect presence of JSON-LD structured data"
    weight = 5

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        json_ld_data = context.page.json_ld_data

        if not json_ld_data:
            return self.failed(
                self.issue(
                    IssueSeverity.WARNING,
                    "No JSON-LD structured data found",
                    "Add JSON-LD structured data to help search engines understand your content better. "
                    "Start with Organization or LocalBusiness schema.",
                )
            )

        json_ld_count = len(json_ld_data)
        types = [t for node in iter_json_ld_nodes(json_ld_data) for t in schema_types(node)] or ["Unknown"]

        return self.passed(
            self.issue(
                IssueSeverity.INFO,
                f"Found {json_ld_count} JSON-LD block(s) with types: {', '.join(types)}",
                "JSON-LD structured data detected. Verify it's properly configured using Google's Rich Results Test.",
                json_ld_count=json_ld_count,
                schema_types=types,
            )
        )


class SchemaShapeRule(AuditRule):
    """
    Validates one schema.org entity type.

    Subclasses set `required_props`, `recommended_props`, the two
    recommendation texts, and either `type_names` or override `matches_type`.
    """
    schema_label: str = ""
    type_names: tuple[str, ...] = ()
    required_props: tuple[str, ...] = ()
    recommended_props: tuple[str, ...] = ()
    required_recommendation: str = ""
    recommended_recommendation: str = ""

    def matches_type(self, schema_type: str) -> bool:
        return schema_type in self.type_names

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        node = find_schema(context.page.json_ld_data, self.matches_type)
        if node is None:
            return self.passed()

        all_props = self.required_props + self.recommended_props
        present = [p for p in all_props if node.get(p)]
        missing = [p for p in all_props if not node.get(p)]
        missing_required = [p for p in self.required_props if p in missing]

        if missing_required:
            return self.failed(
                self.issue(
                    IssueSeverity.CRITICAL,
                    f"{self.schema_label} schema missing required properties: {', '.join(missing_required)}",
                    self.required_recommendation,
                    missing=missing,
                    present=present,
                )
            )

        if missing:
            return self.coverage(
                len(present) / len(all_props),
                True,
                self.issue(
                    IssueSeverity.INFO,
                    f"{self.schema_label} schema could be enhanced. Missing: {', '.join(missing)}",
                    self.recommended_recommendation,
                    missing=missing,
                    present=present,
                ),
            )

        return self.passed()


class OrganizationSchemaRule(SchemaShapeRule):
    id = "schema-organization"
    category = RuleCategory.STRUCTURED_DATA
    name = "Organization Schema"
    description = "Validate Organization schema markup"
    weight = 4

    schema_label = "Organization"
    type_names = ("Organization",)
    required_props = ("name", "url")
    recommended_props = ("logo", "sameAs", "contactPoint")
    required_recommendation = (
        "Add missing required properties to your Organization schema. At minimum, include name and url."
    )
    recommended_recommendation = (
        "Add logo, sameAs (social media URLs), and contactPoint for a more complete Organization schema."
    )


class ProductSchemaRule(SchemaShapeRule):
    id = "schema-product"
    category = RuleCategory.STRUCTURED_DATA
    name = "Product Schema"
    description = "Validate Product schema markup if applicable"
    weight = 4

    schema_label = "Product"
    type_names = ("Product",)
    required_props = ("name", "image", "description")
    recommended_props = ("offers", "brand", "sku", "aggregateRating")
    required_recommendation = "Add required properties: name, image, and description for valid Product schema."
    recommended_recommendation = "Add offers (with price), brand, sku, and aggregateRating for rich product results."


class ArticleSchemaRule(SchemaShapeRule):
    id = "schema-article"
    category = RuleCategory.STRUCTURED_DATA
    name = "Article Schema"
    description = "Validate Article schema markup if applicable"
    weight = 4

    schema_label = "Article"
    type_names = ("Article", "NewsArticle", "BlogPosting")
    required_props = ("headline", "author", "datePublished")
    recommended_props = ("image", "publisher", "dateModified")
    required_recommendation = (
        "Add required properties: headline, author, and datePublished for valid Article schema."
    )
    recommended_recommendation = (
        "Add image, publisher (Organization), and dateModified for better article visibility."
    )


class LocalBusinessSchemaRule(SchemaShapeRule):
    id = "schema-local-business"
    category = RuleCategory.STRUCTURED_DATA
    name = "LocalBusiness Schema"
    description = "Validate LocalBusiness schema markup if applicable"
    weight = 3

    schema_label = "LocalBusiness"
    required_props = ("name", "address")
    recommended_props = ("telephone", "openingHours", "geo", "priceRange")
    required_recommendation = (
        "Add required properties: name and address (PostalAddress) for valid LocalBusiness schema."
    )
    recommended_recommendation = (
        "Add telephone, openingHours, geo coordinates, and priceRange for better local search visibility."
    )

    def matches_type(self, schema_type: str) -> bool:
        return schema_type == "LocalBusiness" or "Business" in schema_type
