"""Account agent: sign-in, registration and profile maintenance."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from models import (
    Account,
    AdministratorProfile,
    ClinicianProfile,
    PatientProfile,
    Role,
)
from store import EntityRepository

from . import validation

logger = logging.getLogger(__name__)


class AccountAgent:
    """Validates user input before it reaches the repository.

    Registration methods return the stored :class:`Account`, or ``None`` with
    the reasons logged when the input is rejected.
    """

    def __init__(self, repository: EntityRepository) -> None:
        self._repository = repository

    def authenticate(self, username: str, password: str) -> Optional[Account]:
        if not validation.is_valid_username(username):
            logger.info("Sign-in refused: malformed username")
            return None
        if not validation.is_not_empty(password):
            logger.info("Sign-in refused for %s: empty password", username)
            return None
        username = username.strip()
        if not self._repository.validate_credentials(username, password):
            logger.info("Sign-in refused for %s: invalid credentials", username)
            return None
        account = self._repository.get_account(username)
        if account is None or not account.active:
            logger.info("Sign-in refused for %s: account inactive", username)
            return None
        logger.info("User %s signed in as %s", username, account.role.value)
        return account

    def authenticate_with_role(self, username: str, password: str, role: Role | str) -> Optional[Account]:
        account = self.authenticate(username, password)
        if account is None:
            return None
        try:
            expected = role if isinstance(role, Role) else Role(str(role).strip().upper())
        except ValueError:
            return None
        return account if account.role is expected else None

    def is_username_available(self, username: str) -> bool:
        return validation.is_valid_username(username) and not self._repository.account_exists(username.strip())

    def register_patient(
        self,
        username: str,
        password: str,
        confirm_password: str,
        full_name: str,
        email: str,
        phone: str,
        address: str,
        age: int,
        gender: str,
        blood_type: str,
        emergency_contact: str,
    ) -> Optional[Account]:
        problems = self._common_problems(username, password, full_name, email, phone)
        if not validation.passwords_match(password, confirm_password):
            problems.append("passwords do not match")
        if not validation.is_valid_age(age):
            problems.append("age must be between 0 and 150")
        if not validation.is_valid_gender(gender):
            problems.append("gender is not recognised")
        if not validation.is_valid_blood_type(blood_type):
            problems.append("blood type is not recognised")
        if not validation.is_valid_phone(emergency_contact):
            problems.append("emergency contact must be a phone number")
        if problems:
            return self._reject(username, problems)

        profile = PatientProfile(
            patient_id=self._repository.generate_patient_id(),
            age=age,
            gender=gender.strip(),
            blood_type=blood_type.strip().upper(),
            emergency_contact=emergency_contact.strip(),
            registration_date=self._repository.today(),
        )
        return self._store(self._account(username, password, full_name, email, phone, address, profile))

    def register_clinician(
        self,
        username: str,
        password: str,
        full_name: str,
        email: str,
        phone: str,
        address: str,
        specialization: str,
        license_number: str,
        experience_years: int = 0,
        qualifications: Iterable[str] = (),
        time_slots: Optional[Iterable[str]] = None,
    ) -> Optional[Account]:
        problems = self._common_problems(username, password, full_name, email, phone)
        if not validation.is_not_empty(specialization):
            problems.append("specialization is required")
        if not validation.is_not_empty(license_number):
            problems.append("license number is required")
        if not isinstance(experience_years, int) or experience_years < 0:
            problems.append("experience must be a non-negative number of years")
        slots = [slot.strip() for slot in time_slots] if time_slots is not None else None
        if slots is not None and not all(validation.is_valid_time_slot(slot) for slot in slots):
            problems.append("time slots must be HH:MM-HH:MM")
        if problems:
            return self._reject(username, problems)

        profile = ClinicianProfile(
            clinician_id=self._repository.generate_clinician_id(),
            specialization=specialization.strip(),
            license_number=license_number.strip(),
            experience_years=experience_years,
            qualifications={q.strip() for q in qualifications if q and q.strip()},
        )
        if slots is not None:
            profile.available_time_slots = list(dict.fromkeys(slots))
        return self._store(self._account(username, password, full_name, email, phone, address, profile))

    def register_administrator(
        self,
        username: str,
        password: str,
        full_name: str,
        email: str,
        phone: str,
        address: str,
    ) -> Optional[Account]:
        problems = self._common_problems(username, password, full_name, email, phone)
        if problems:
            return self._reject(username, problems)
        profile = AdministratorProfile(admin_id=self._repository.generate_admin_id())
        return self._store(self._account(username, password, full_name, email, phone, address, profile))

    def update_contact(
        self,
        username: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> bool:
        if email is not None and not validation.is_valid_email(email):
            return False
        if phone is not None and not validation.is_valid_phone(phone):
            return False
        return self._repository.update_contact(
            username,
            email=email.strip() if email is not None else None,
            phone=phone.strip() if phone is not None else None,
            address=address.strip() if address is not None else None,
        )

    def change_password(self, username: str, current_password: str, new_password: str) -> bool:
        if not self._repository.validate_credentials(username, current_password):
            return False
        if not validation.is_valid_password(new_password):
            return False
        return self._repository.change_password(username, new_password)

    def deactivate(self, username: str) -> bool:
        return self._repository.set_active(username, False)

    def reactivate(self, username: str) -> bool:
        return self._repository.set_active(username, True)

    def remove_clinician(self, clinician_id: str) -> bool:
        return self._repository.remove_clinician_by_id(clinician_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _common_problems(
        self,
        username: str,
        password: str,
        full_name: str,
        email: str,
        phone: str,
    ) -> List[str]:
        problems: List[str] = []
        if not validation.is_valid_username(username):
            problems.append("username must be 3-20 letters, digits or underscores")
        elif self._repository.account_exists(username.strip()):
            problems.append("username is already taken")
        if not validation.is_valid_password(password):
            problems.append("password must be 8+ characters with upper, lower and digit")
        if not validation.is_valid_name(full_name):
            problems.append("full name is not valid")
        if not validation.is_valid_email(email):
            problems.append("email is not valid")
        if not validation.is_valid_phone(phone):
            problems.append("phone is not valid")
        return problems

    @staticmethod
    def _account(username, password, full_name, email, phone, address, profile) -> Account:
        return Account(
            username=username.strip(),
            password=password,
            full_name=full_name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            address=validation.sanitize(address),
            profile=profile,
        )

    @staticmethod
    def _reject(username: str, problems: List[str]) -> None:
        logger.info("Registration of %r refused: %s", username, "; ".join(problems))
        return None

    def _store(self, account: Account) -> Optional[Account]:
        if not self._repository.add_account(account):
            logger.info("Registration of %s was not stored", account.username)
            return None
        logger.info("Registered %s %s as %s", account.role.value.lower(), account.role_id, account.username)
        return account


__all__ = ["AccountAgent"]
