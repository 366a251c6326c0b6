"""
Convenience functions for common GraphQL operations.

Unlike ``GraphQLClient.execute`` these helpers raise ``GraphQLClientError``
(built from the first response error) instead of returning errors, for call
sites that prefer exceptions.
"""

from __future__ import annotations

from typing import Any

from .builders import (
    build_account_query,
    build_accounts_query,
    build_create_account_mutation,
    build_trial_balance_query,
)
from .client import GraphQLClient
from .exceptions import GraphQLClientError
from .models import GraphQLRequest, new_request


async def fetch_field(client: GraphQLClient, request: GraphQLRequest, field: str) -> Any:
    """
    Execute ``request`` and return ``data[field]``.

    Args:
        client: Client to execute with
        request: Operation to send
        field: Top-level field of ``data`` to return

    Returns:
        The field value, or None when the server returned no such field

    Raises:
        GraphQLClientError: If the response carries errors
    """
    response = await client.execute(request)

    if response.errors:
        raise GraphQLClientError.from_error(response.errors[0])

    return response.get_data(field)


async def get_account(client: GraphQLClient, id: int) -> Any:
    return await fetch_field(client, new_request(build_account_query(id=id)), "account")


async def get_account_by_code(client: GraphQLClient, code: str) -> Any:
    return await fetch_field(client, new_request(build_account_query(code=code)), "account")


async def get_accounts(
    client: GraphQLClient,
    first: int = 10,
    after: str = "",
    account_type: str = "",
) -> Any:
    """Fetch one page of accounts as a connection (``edges``/``pageInfo``)."""
    query = build_accounts_query(first=first, after=after, account_type=account_type)
    return await fetch_field(client, new_request(query), "accounts")


async def create_account(client: GraphQLClient, code: str, name: str, account_type: str) -> Any:
    query = build_create_account_mutation(code, name, account_type)
    return await fetch_field(client, new_request(query), "createAccount")


async def get_trial_balance(client: GraphQLClient, as_of_date: str) -> Any:
    return await fetch_field(
        client, new_request(build_trial_balance_query(as_of_date)), "trialBalance"
    )
