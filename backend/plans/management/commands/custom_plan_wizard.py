from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.client import ApiClient, ApiError
from plans.constants import ROLES
from plans.wizard import CustomPlanSaveError, CustomPlanWizard, WizardError, WizardStep


class Command(BaseCommand):
    help = "Walk through the six-step custom plan wizard for a tenant against the REST API"

    def add_arguments(self, parser):
        parser.add_argument("tenant_id", type=int)
        parser.add_argument("--base-url", default=settings.API_BASE_URL)
        parser.add_argument("--token", required=True, help="Super-admin access token")

    def handle(self, *args, **options):
        client = ApiClient(options["base_url"], token=options["token"])
        try:
            wizard = CustomPlanWizard.load(client, options["tenant_id"])
        except ApiError as exc:
            raise CommandError(f"Could not load tenant {options['tenant_id']}: {exc}")

        if not wizard.base_plans:
            raise CommandError("No active base plans available for this tenant type.")

        self.stdout.write(self.style.MIGRATE_HEADING(f"Custom plan for {wizard.tenant.get('name')}"))

        steps = {
            WizardStep.BASE: self._base_step,
            WizardStep.LIMITS: self._limits_step,
            WizardStep.PRICING: self._pricing_step,
            WizardStep.FEATURES: self._features_step,
            WizardStep.DETAILS: self._details_step,
            WizardStep.PREVIEW: self._preview_step,
        }

        confirmed = False
        while True:
            step = wizard.current_step
            self.stdout.write(self.style.HTTP_INFO(f"\n[{step.value + 1}/6] {step.title}"))
            try:
                steps[step](wizard)
            except WizardError as exc:
                self.stderr.write(self.style.ERROR(str(exc)))
                continue

            if wizard.is_last_step:
                answer = self._ask("Save this plan? [y/N/b(ack)]", "n").lower()
                if answer.startswith("b"):
                    wizard.previous()
                    continue
                confirmed = answer.startswith("y")
                break

            choice = self._ask("Continue? [Y/b(ack)]", "y").lower()
            if choice.startswith("b") and not wizard.is_first_step:
                wizard.previous()
                continue
            try:
                wizard.next()
            except WizardError as exc:
                self.stderr.write(self.style.ERROR(str(exc)))

        if not confirmed:
            self.stdout.write("Nothing saved.")
            return

        try:
            plan = wizard.save(client)
        except CustomPlanSaveError as exc:
            if exc.created_plan:
                self.stderr.write(self.style.WARNING(f"Plan {exc.created_plan['id']} exists but is not assigned."))
            raise CommandError(str(exc))

        self.stdout.write(self.style.SUCCESS(f"Custom plan '{plan['display_name']}' ({plan['id']}) assigned."))

    # ----------------------------------------------------------
    #  Steps
    # ----------------------------------------------------------
    def _ask(self, prompt, default=""):
        answer = input(f"{prompt} ").strip()
        return answer or default

    def _base_step(self, wizard):
        for key, base in wizard.base_plans.items():
            self.stdout.write(f"  {key:<15} {base.display_name:<20} {base.price}/month")
        current = wizard.draft.base_plan
        choice = self._ask(f"Base plan [{current or ''}]:", current or "")
        if choice and choice != current:
            wizard.select_base_plan(choice)

    def _limits_step(self, wizard):
        for role in ROLES:
            current = wizard.draft.limits.get(role, 0)
            wizard.set_limit(role, self._ask(f"  {role} seats (-1 = unlimited) [{current}]:", current))

    def _pricing_step(self, wizard):
        wizard.set_price(self._ask(f"  Monthly price [{wizard.draft.price}]:", wizard.draft.price))
        for role in ROLES:
            current = wizard.draft.extra_slot_price.get(role)
            value = self._ask(f"  Extra {role} seat price [{current if current is not None else '-'}]:", "")
            if value:
                wizard.set_extra_slot_price(role, value)

    def _features_step(self, wizard):
        for name, enabled in sorted(wizard.draft.features.items()):
            answer = self._ask(f"  {name} [{'Y/n' if enabled else 'y/N'}]:", "y" if enabled else "n")
            wizard.set_feature(name, answer.lower().startswith("y"))

    def _details_step(self, wizard):
        name = self._ask(f"  Display name [{wizard.draft.display_name}]:", wizard.draft.display_name)
        terms = self._ask("  Contract terms (optional):", wizard.draft.contract_terms)
        wizard.set_details(display_name=name, contract_terms=terms)

    def _preview_step(self, wizard):
        payload = wizard.preview()
        for key in ("display_name", "price", "limits", "extra_slot_price", "features", "contract_terms"):
            self.stdout.write(f"  {key}: {payload[key]}")
