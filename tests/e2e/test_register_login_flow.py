import os
import uuid

from seleniumbase import BaseCase


BASE_URL = os.getenv("E2E_BASE_URL", "http://localhost:5000").rstrip("/")


class RegisterLoginFlowTests(BaseCase):
    #End-to-end coverage of the register, login and ticket flows through the front controller.

    def setUp(self):
        super().setUp()
        self.base_url = BASE_URL

    def _unique_credentials(self):
        suffix = uuid.uuid4().hex[:8]
        return f"selenium_{suffix}@example.com", "SeleniumTest123!"

    def _register_via_ui(self, email, password):
        self.open(f"{self.base_url}/?command=addUser")
        self.wait_for_element_visible("#register-form", timeout=10)
        self.type("#register-form #firstname", "Selenium")
        self.type("#register-form #lastname", "User")
        self.type("#register-form #email", email)
        self.type("#register-form #password", password)
        self.click("#register-form button.register-button")
        self.wait_for_text("User registered successfully", "#message", timeout=8)

    def _login_via_ui(self, email, password):
        self.open(f"{self.base_url}/?command=login")
        self.wait_for_element_visible("#login-form", timeout=10)
        self.type("#login-form input[name='email']", email)
        self.type("#login-form input[name='password']", password)
        self.click("#login-form button.login__button")
        self.wait_for_element("h1.schedule__title", timeout=10)

    def test_user_can_register(self):
        email, password = self._unique_credentials()
        self._register_via_ui(email, password)

    def test_user_can_login(self):
        email, password = self._unique_credentials()
        self._register_via_ui(email, password)
        self._login_via_ui(email, password)
        self.assert_text("My tickets", "nav")

    def test_user_can_buy_and_cancel_ticket(self):
        # needs at least one show in the schedule (run seed.py first)
        email, password = self._unique_credentials()
        self._register_via_ui(email, password)
        self._login_via_ui(email, password)

        self.click("#schedule td a")
        self.wait_for_element("#hall", timeout=10)
        ticket_id = self.get_attribute(".seat:not(.seat--sold)", "data-ticket-id")
        self.click(f".seat[data-ticket-id='{ticket_id}'] .seat__buy")
        self.wait_for_element(f".seat--sold[data-ticket-id='{ticket_id}']", timeout=10)

        self.open(f"{self.base_url}/?command=tickets")
        card_selector = f".ticket-card[data-ticket-id='{ticket_id}']"
        self.assert_element(card_selector)
        self.click(f"{card_selector} .ticket-card__cancel")
        self.assert_element_absent(card_selector)
