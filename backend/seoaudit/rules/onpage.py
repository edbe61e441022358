"""
On-page rules (25 points): title, meta description, headings, content
length, image alt text, social tags and links.
"""
from seoaudit.models.audit import AuditRuleContext, IssueSeverity, RuleCategory, RuleCheckResult
from seoaudit.rules.base import AuditRule
from seoaudit.services.extractor import count_words, visible_text
from seoaudit.services.scoring import round_half_up

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
DESCRIPTION_MIN_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 160
H1_MIN_LENGTH = 10
MIN_WORDS = 300
GOOD_WORDS = 500
MIN_INTERNAL_LINKS = 3

OG_TAGS = ["og:title", "og:description", "og:image", "og:url"]
TWITTER_TAGS = ["twitter:card", "twitter:title", "twitter:description"]

# Page chrome that does not count as content
NON_CONTENT_TAGS = ("script", "style", "nav", "footer", "header")


def _meta_content(soup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    return (tag.get("content") or "").strip() if tag else ""


class TitleTagRule(AuditRule):
    id = "onpage-title"
    category = RuleCategory.ONPAGE
    name = "Title Tag"
    description = "Verify title tag exists and is 30-60 characters long"
    weight = 5

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        tag = context.soup.find("title")
        title = tag.get_text().strip() if tag else ""

        if not title:
            return self.failed(
                self.issue(
                    IssueSeverity.CRITICAL,
                    "No title tag found",
                    "Add a title tag to your page: <title>Your Page Title - Brand Name</title>. "
                    "The title should be descriptive and include your target keywords.",
                )
            )

        length = len(title)
        if length < TITLE_MIN_LENGTH:
            return self.partial(
                0.5,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    f"Title tag is too short ({length} characters)",
                    "Expand your title tag to 30-60 characters. Include descriptive keywords and your brand name.",
                    title=title,
                    length=length,
                ),
            )

        if length > TITLE_MAX_LENGTH:
            return self.partial(
                0.7,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    f"Title tag is too long ({length} characters)",
                    "Shorten your title tag to 30-60 characters. "
                    "Search engines may truncate longer titles in search results.",
                    title=title,
                    length=length,
                ),
            )

        return self.passed()


class MetaDescriptionRule(AuditRule):
    id = "onpage-meta-description"
    category = RuleCategory.ONPAGE
    name = "Meta Description"
    description = "Check meta description exists and is 120-160 characters"
    weight = 4

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        description = _meta_content(context.soup, name="description")

        if not description:
            return self.failed(
                self.issue(
                    IssueSeverity.WARNING,
                    "No meta description found",
                    'Add a meta description: <meta name="description" content="Your compelling description here">. '
                    "This helps improve click-through rates from search results.",
                )
            )

        length = len(description)
        if length < DESCRIPTION_MIN_LENGTH:
            return self.partial(
                0.5,
                False,
                self.issue(
                    IssueSeverity.INFO,
                    f"Meta description is too short ({length} characters)",
                    "Expand your meta description to 120-160 characters for better visibility in search results.",
                    description=description,
                    length=length,
                ),
            )

        if length > DESCRIPTION_MAX_LENGTH:
            return self.partial(
                0.7,
                False,
                self.issue(
                    IssueSeverity.INFO,
                    f"Meta description is too long ({length} characters)",
                    "Shorten your meta description to 120-160 characters. "
                    "Search engines may truncate longer descriptions.",
                    description=description,
                    length=length,
                ),
            )

        return self.passed()


class H1TagRule(AuditRule):
    id = "onpage-h1"
    category = RuleCategory.ONPAGE
    name = "H1 Tag"
    description = "Ensure exactly one H1 tag exists on the page"
    weight = 4

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        h1_texts = [h1.get_text(" ", strip=True) for h1 in context.soup.find_all("h1")]
        count = len(h1_texts)

        if count == 0:
            return self.failed(
                self.issue(
                    IssueSeverity.CRITICAL,
                    "No H1 tag found",
                    "Add an H1 tag to your page. The H1 should describe the main topic and include your primary keyword.",
                )
            )

        if count > 1:
            return self.coverage(
                0.5,
                False,
                self.issue(
                    IssueSeverity.WARNING,
                    f"Multiple H1 tags found ({count})",
                    "Use only one H1 tag per page. Multiple H1s can dilute the page focus. "
                    "Consider changing additional H1s to H2 or H3.",
                    count=count,
                    h1_texts=h1_texts,
                ),
            )

        h1_text = h1_texts[0]
        if len(h1_text) < H1_MIN_LENGTH:
            return self.partial(
                0.7,
                False,
                self.issue(
                    IssueSeverity.INFO,
                    "H1 tag is too short",
                    "Make your H1 more descriptive. It should clearly describe the page content "
                    "and include relevant keywords.",
                    h1_text=h1_text,
                ),
            )

        return self.passed()


class WordCountRule(AuditRule):
    id = "onpage-word-count"
    category = RuleCategory.ONPAGE
    name = "Content Length"
    description = "Check that page has at least 300 words of content"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        word_count = count_words(visible_text(context.soup, exclude=NON_CONTENT_TAGS))

        if word_count < MIN_WORDS:
            return self.failed(
                self.issue(
                    IssueSeverity.WARNING,
                    f"Page has insufficient content ({word_count} words)",
                    "Add more content to your page. Aim for at least 300 words. "
                    "Quality content helps with SEO and provides value to visitors.",
                    word_count=word_count,
                )
            )

        if word_count < GOOD_WORDS:
            return self.partial(
                0.7,
                True,
                self.issue(
                    IssueSeverity.INFO,
                    f"Page has minimal content ({word_count} words)",
                    "Consider adding more content. Pages with 500+ words typically perform better in search rankings.",
                    word_count=word_count,
                ),
            )

        return self.passed()


class ImageAltTextRule(AuditRule):
    id = "onpage-images-alt"
    category = RuleCategory.ONPAGE
    name = "Image Alt Text"
    description = "Verify all images have alt text attributes"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        images = context.soup.find_all("img")
        total = len(images)
        # An empty alt="" is valid for decorative images
        missing = [img.get("src") or "unknown" for img in images if img.get("alt") is None]

        if not missing:
            return self.passed()

        coverage = (total - len(missing)) / total * 100
        return self.coverage(
            coverage / 100,
            coverage >= 80,
            self.issue(
                IssueSeverity.WARNING if coverage < 50 else IssueSeverity.INFO,
                f"{len(missing)} of {total} images missing alt text ({round_half_up(coverage)}% coverage)",
                "Add descriptive alt text to all images. Alt text improves accessibility and helps search "
                'engines understand image content. Format: <img src="..." alt="Descriptive text here">',
                total_images=total,
                missing_alt=len(missing),
                coverage=coverage,
                images=missing[:20],
            ),
        )


class OpenGraphRule(AuditRule):
    id = "onpage-open-graph"
    category = RuleCategory.ONPAGE
    name = "Open Graph Tags"
    description = "Check for Open Graph and Twitter Card meta tags"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        soup = context.soup
        missing_og = [tag for tag in OG_TAGS if not soup.find("meta", attrs={"property": tag})]
        missing_twitter = [tag for tag in TWITTER_TAGS if not soup.find("meta", attrs={"name": tag})]

        if not missing_og and not missing_twitter:
            return self.passed()

        og_coverage = (len(OG_TAGS) - len(missing_og)) / len(OG_TAGS) * 100
        twitter_coverage = (len(TWITTER_TAGS) - len(missing_twitter)) / len(TWITTER_TAGS) * 100
        coverage = (og_coverage + twitter_coverage) / 2

        issues = []
        if missing_og:
            issues.append(
                self.issue(
                    IssueSeverity.INFO,
                    f"Missing Open Graph tags: {', '.join(missing_og)}",
                    "Add Open Graph meta tags to improve social media sharing. "
                    'Example: <meta property="og:title" content="Your Title">',
                    missing_og_tags=missing_og,
                )
            )
        if missing_twitter:
            issues.append(
                self.issue(
                    IssueSeverity.INFO,
                    f"Missing Twitter Card tags: {', '.join(missing_twitter)}",
                    'Add Twitter Card meta tags. Example: <meta name="twitter:card" content="summary_large_image">',
                    missing_twitter_tags=missing_twitter,
                )
            )

        return self.coverage(coverage / 100, coverage >= 70, *issues)


class LinksRule(AuditRule):
    id = "onpage-links"
    category = RuleCategory.ONPAGE
    name = "Internal/External Links"
    description = "Analyze internal and external link structure"
    weight = 3

    async def check(self, context: AuditRuleContext) -> RuleCheckResult:
        internal = len(context.page.internal_links)
        external = len(context.page.external_links)

        if internal + external == 0:
            return self.failed(
                self.issue(
                    IssueSeverity.WARNING,
                    "No links found on the page",
                    "Add internal and external links. Internal links help with site navigation and SEO. "
                    "External links to authoritative sources add value.",
                )
            )

        issues = []
        if internal < MIN_INTERNAL_LINKS:
            issues.append(
                self.issue(
                    IssueSeverity.INFO,
                    f"Low number of internal links ({internal})",
                    "Add more internal links to related pages on your site. "
                    "This improves site navigation and helps distribute page authority.",
                    internal_links=internal,
                )
            )
        if external == 0:
            issues.append(
                self.issue(
                    IssueSeverity.INFO,
                    "No external links found",
                    "Consider adding external links to authoritative sources. "
                    "This can add credibility and value to your content.",
                )
            )

        if internal == 0:
            fraction = 0.3
        elif internal < MIN_INTERNAL_LINKS:
            fraction = 0.7
        else:
            fraction = 1.0

        return self.coverage(fraction, internal >= MIN_INTERNAL_LINKS, *issues)
