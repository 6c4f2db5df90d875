"""
Verification of accounts registered in a deployed Spinnaker instance.

Gate reports the credentials it loaded as a JSON array. An expected account
is found when any observed account matches it (see ``Account.matches``). One
observed account may satisfy several expected accounts, so listing the same
expected account twice does not require two observed copies.
"""

import logging
from collections.abc import Sequence

from pydantic import ValidationError

from spinnaker_e2e.errors import VerificationError
from spinnaker_e2e.models import Account, AccountList
from spinnaker_e2e.observability import log_main_step
from spinnaker_e2e.utils.gateway import ManifestGateway
from spinnaker_e2e.utils.result import Result

logger = logging.getLogger(__name__)


def count_matching_accounts(
    expected: Sequence[Account], observed: Sequence[Account]
) -> int:
    """Count expected accounts that have at least one matching observed account."""
    return sum(
        1 for account in expected if any(account.matches(c) for c in observed)
    )


def verify_accounts_exist(
    gateway: ManifestGateway, gate_url: str, endpoint: str, *accounts: Account
) -> Result[int]:
    """
    Check that every expected account is registered in Spinnaker.

    Args:
        gateway: Gateway used to query the instance
        gate_url: Base URL of the Gate API
        endpoint: Path of the account listing, e.g. ``/credentials``
        *accounts: Expected accounts

    Returns:
        Result carrying the number of accounts found, or a VerificationError
        listing expected and observed accounts
    """
    log_main_step("Verifying spinnaker accounts")
    response = gateway.http_get(f"{gate_url}{endpoint}")
    if not response.ok:
        return Result.failure(response.error)

    try:
        credentials = AccountList.validate_json(response.value) or []
    except ValidationError as e:
        return Result.failure(
            VerificationError(
                f"Unable to decode accounts returned by {endpoint}: {e}", cause=e
            )
        )

    found = count_matching_accounts(accounts, credentials)
    if found != len(accounts):
        expected_list = ", ".join(str(a) for a in accounts)
        observed_list = ", ".join(str(c) for c in credentials)
        return Result.failure(
            VerificationError(
                f"Unable to find all accounts in spinnaker ({found}/{len(accounts)}). "
                f"Expected: [{expected_list}] but found: [{observed_list}]"
            )
        )

    logger.info(f"Found all {found} expected accounts")
    return Result.success(found)
