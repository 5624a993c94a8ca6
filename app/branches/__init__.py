"""
Branches - Physical shop locations of the business.

Each branch owns exactly one cashbox (see ledger.models.Cashbox); the two
are created together by BranchService.create_branch.
"""
