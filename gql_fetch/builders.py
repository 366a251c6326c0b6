"""
Query document templates for the accounting API.

The client only needs a document string; these helpers produce the documents
for the account operations used by the convenience helpers.
"""

from __future__ import annotations

import json

_MONEY = "{ amount currency }"

_ACCOUNT_FIELDS = f"""
        id
        code
        name
        accountType
        balance {_MONEY}
        isActive
        createdAt
        updatedAt"""


def _quote(value: str) -> str:
    """Render a GraphQL string literal."""
    return json.dumps(value, ensure_ascii=False)


def build_account_query(id: int = 0, code: str = "") -> str:
    """
    Query for a single account by id or, failing that, by code.

    Returns an empty string when neither is given.
    """
    if id > 0:
        args = f"id: {id}"
    elif code:
        args = f"code: {_quote(code)}"
    else:
        return ""

    return f"""
    query GetAccount {{
      account({args}) {{{_ACCOUNT_FIELDS}
      }}
    }}
    """


def build_accounts_query(first: int = 10, after: str = "", account_type: str = "") -> str:
    """Paginated account listing, optionally filtered by account type."""
    args = f"first: {first}"

    if after:
        args += f", after: {_quote(after)}"

    if account_type:
        args += f", accountType: {account_type}"

    return f"""
    query GetAccounts {{
      accounts({args}) {{
        edges {{
          node {{
            id
            code
            name
            accountType
            balance {_MONEY}
            isActive
          }}
          cursor
        }}
        pageInfo {{
          hasNextPage
          hasPreviousPage
          startCursor
          endCursor
        }}
        totalCount
      }}
    }}
    """


def build_create_account_mutation(code: str, name: str, account_type: str) -> str:
    return f"""
    mutation CreateAccount {{
      createAccount(input: {{
        code: {_quote(code)}
        name: {_quote(name)}
        accountType: {account_type}
      }}) {{{_ACCOUNT_FIELDS}
      }}
    }}
    """


def build_trial_balance_query(as_of_date: str) -> str:
    """Trial balance as of an ISO date (``YYYY-MM-DD``)."""
    return f"""
    query TrialBalance {{
      trialBalance(asOfDate: {_quote(as_of_date)}) {{
        asOfDate
        accounts {{
          accountCode
          accountName
          debitBalance {_MONEY}
          creditBalance {_MONEY}
        }}
        totalDebits {_MONEY}
        totalCredits {_MONEY}
        isBalanced
      }}
    }}
    """
