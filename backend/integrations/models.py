import re

from django.db import models

from core.models import TenantAwareModel, TimeStampedModel

PROVIDER_CHOICES = [
    ("whatsapp", "WhatsApp Business"),
    ("stripe", "Stripe"),
    ("mercadopago", "Mercado Pago"),
    ("openai", "OpenAI"),
    ("anthropic", "Anthropic"),
    ("google_calendar", "Google Calendar"),
]

# Configuration keys a provider cannot work without
PROVIDER_REQUIRED_KEYS = {
    "whatsapp": ("access_token", "phone_number_id"),
    "stripe": ("secret_key", "publishable_key"),
    "mercadopago": ("access_token", "public_key"),
    "openai": ("api_key",),
    "anthropic": ("api_key",),
    "google_calendar": ("client_id", "client_secret"),
}

# Plan feature a provider needs, when it needs one
PROVIDER_FEATURES = {
    "whatsapp": "whatsapp",
    "openai": "ai_assistant",
    "anthropic": "ai_assistant",
}

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")


class Integration(TenantAwareModel, TimeStampedModel):
    STATUS_CHOICES = [
        ("not_configured", "Not configured"),
        ("connected", "Connected"),
        ("error", "Error"),
    ]

    provider = models.CharField(max_length=30, choices=PROVIDER_CHOICES)
    enabled = models.BooleanField(default=False)
    config = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="not_configured")
    last_tested_at = models.DateTimeField(null=True, blank=True)
    last_error = models.TextField(blank=True)

    class Meta:
        ordering = ["provider"]
        constraints = [
            models.UniqueConstraint(fields=["tenant", "provider"], name="unique_integration_per_tenant_provider"),
        ]

    @property
    def required_keys(self):
        return PROVIDER_REQUIRED_KEYS.get(self.provider, ())

    def missing_keys(self):
        config = self.config or {}
        return [key for key in self.required_keys if not str(config.get(key) or "").strip()]

    def __str__(self):
        return f"{self.get_provider_display()} ({self.tenant})"


class MessageTemplate(TenantAwareModel, TimeStampedModel):
    """WhatsApp message template. Placeholders are written as {{name}}."""
    CATEGORY_CHOICES = [
        ("marketing", "Marketing"),
        ("utility", "Utility"),
        ("authentication", "Authentication"),
    ]
    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("pending", "Pending approval"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    name = models.CharField(max_length=100)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default="utility")
    language = models.CharField(max_length=10, default="pt_BR")
    content = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="draft")

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["tenant", "name", "language"], name="unique_template_name_language"),
        ]

    @property
    def variables(self):
        seen = []
        for name in PLACEHOLDER_RE.findall(self.content or ""):
            if name not in seen:
                seen.append(name)
        return seen

    def render(self, values):
        return PLACEHOLDER_RE.sub(lambda match: str(values.get(match.group(1), match.group(0))), self.content)

    def __str__(self):
        return f"{self.name} [{self.language}]"
