"""Email address validation utilities."""

from email_validator import EmailNotValidError, validate_email

from inkpost.utils.errors import InvalidEmailAddressError
from inkpost.utils.logging import get_logger

logger = get_logger(__name__)


class EmailValidator:
    """Validate email address syntax (no DNS lookups)."""

    @staticmethod
    def is_valid_email(email_address: str) -> bool:
        """Check whether an address is syntactically valid."""
        if not email_address or not isinstance(email_address, str):
            return False

        try:
            validate_email(email_address.strip(), check_deliverability=False)
        except EmailNotValidError:
            return False

        return True

    @staticmethod
    def normalize(email_address: str, role: str = "email") -> str:
        """Return the normalized form of an address or raise.

        Raises:
            InvalidEmailAddressError: If the address is empty or malformed
        """
        if not email_address or not email_address.strip():
            raise InvalidEmailAddressError(
                f"The {role} address is required", details={"role": role}
            )

        try:
            result = validate_email(email_address.strip(), check_deliverability=False)
        except EmailNotValidError as e:
            logger.warning(f"Rejected {role} address: {e}")
            raise InvalidEmailAddressError(
                f"Invalid {role} address '{email_address}': {e}",
                details={"role": role},
            ) from e

        return result.normalized
