"""
Repositories package

Each repository encapsulates database operations for a model:
- token_repository.py       (token store)
- tokenevent_repository.py  (append-only event log)

Usage:
    from tokenkeep.repositories.token_repository import TokenRepository
    tokens = TokenRepository.get_all()
"""
