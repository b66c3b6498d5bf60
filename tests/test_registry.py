import logging

import pytest

from errmap.domain.errors import (
    ConfigError,
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from errmap.domain.registry import RegistryBuilder
from tests.fakes import DraftPostNotFound, DuplicateAndMissing, PostNotFound, Unregistered

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    'kind, status_code, code',
    [
        (NotFoundError, 404, 'not_found'),
        (ValidationError, 422, 'validation_error'),
        (UnauthorizedError, 401, 'unauthorized'),
        (ConflictError, 409, 'conflict'),
        (InternalError, 500, 'internal_error'),
    ],
)
def test_default_registry_exact_kinds(registry, kind, status_code, code):
    reg = registry.resolve(kind)
    assert reg.kind is kind
    assert reg.status_code == status_code
    assert reg.code == code
    assert not reg.is_default


def test_unregistered_kind_falls_back_to_default(registry):
    reg = registry.resolve(Unregistered)
    assert reg.is_default
    assert reg.status_code == 500
    assert reg.code == 'internal_error'


def test_subclass_resolves_to_nearest_registered_ancestor():
    registry = (
        RegistryBuilder()
        .register(DomainError, 400)
        .register(NotFoundError, 404)
        .register(PostNotFound, 410)
        .build()
    )
    assert registry.resolve(DraftPostNotFound).status_code == 410
    assert registry.resolve(PostNotFound).status_code == 410
    assert registry.resolve(ConflictError).status_code == 400


def test_more_specific_wins_even_if_registered_later():
    registry = (
        RegistryBuilder()
        .register(Exception, 503)
        .register(NotFoundError, 404)
        .build()
    )
    assert registry.resolve(DraftPostNotFound).status_code == 404
    assert registry.resolve(KeyError).status_code == 503


def test_equal_distance_tie_goes_to_first_registered():
    conflict_first = RegistryBuilder().register(ConflictError, 409).register(NotFoundError, 404).build()
    missing_first = RegistryBuilder().register(NotFoundError, 404).register(ConflictError, 409).build()

    assert conflict_first.resolve(DuplicateAndMissing).status_code == 409
    assert missing_first.resolve(DuplicateAndMissing).status_code == 404


def test_duplicate_registration_keeps_first(caplog):
    caplog.set_level(logging.WARNING, logger='errmap.domain.registry')
    builder = RegistryBuilder().register(NotFoundError, 404).register(NotFoundError, 410)
    registry = builder.build()

    assert len(registry) == 1
    assert registry.resolve(NotFoundError).status_code == 404
    assert 'already registered' in caplog.text


@pytest.mark.parametrize('status_code', [99, 600, '404', 404.0, True])
def test_invalid_status_code_raises_config_error(status_code):
    with pytest.raises(ConfigError) as e:
        RegistryBuilder().register(NotFoundError, status_code)
    assert 'status_code' in str(e.value)


@pytest.mark.parametrize('kind', ['NotFound', NotFoundError('x'), int, None])
def test_non_exception_kind_raises_config_error(kind):
    with pytest.raises(ConfigError) as e:
        RegistryBuilder().register(kind, 404)
    assert 'not an exception class' in str(e.value)


def test_non_callable_body_raises_config_error():
    with pytest.raises(ConfigError):
        RegistryBuilder().register(NotFoundError, 404, body={'a': 1})


def test_default_can_be_replaced():
    registry = RegistryBuilder().set_default(503, code='unavailable', title='Try later').build()
    assert registry.resolve(Unregistered).status_code == 503
    assert registry.default.code == 'unavailable'

    with pytest.raises(ConfigError):
        RegistryBuilder().set_default(500, code='', title='x')


def test_built_registry_is_not_affected_by_later_registrations():
    builder = RegistryBuilder().register(NotFoundError, 404)
    first = builder.build()
    builder.register(ConflictError, 409)
    second = builder.build()

    assert ConflictError not in first
    assert first.resolve(ConflictError).is_default
    assert second.resolve(ConflictError).status_code == 409


def test_registry_table_is_read_only(registry):
    with pytest.raises(TypeError):
        registry._table[KeyError] = registry.default
    assert isinstance(registry.registrations, tuple)
    assert registry.kinds() == [NotFoundError, ValidationError, UnauthorizedError, ConflictError, InternalError]


def test_code_and_title_defaults_come_from_kind():
    registry = RegistryBuilder().register(PostNotFound, 404).register(KeyError, 404).build()
    assert registry.resolve(PostNotFound).code == 'post_not_found'
    assert registry.resolve(PostNotFound).title == 'PostNotFound'
    assert registry.resolve(KeyError).code == 'KeyError'


def test_config_error_resolves_through_internal(registry):
    reg = registry.resolve(ConfigError)
    assert reg.kind is InternalError
    assert reg.status_code == 500


def test_existing_subclasses_are_resolved_at_build_time():
    registry = RegistryBuilder().register(NotFoundError, 404).register(PostNotFound, 410).build()

    assert registry._table[DraftPostNotFound].status_code == 410
    assert registry._table[DuplicateAndMissing].status_code == 404
    assert DraftPostNotFound not in registry


def test_classes_created_after_build_still_resolve():
    registry = RegistryBuilder().register(NotFoundError, 404).build()

    class LateNotFound(NotFoundError):
        pass

    assert LateNotFound not in registry._table
    assert registry.resolve(LateNotFound).status_code == 404
    # lookups do not grow the shared table
    assert LateNotFound not in registry._table


def test_iterating_registry_yields_registrations_in_order(registry):
    assert [reg.order for reg in registry] == [0, 1, 2, 3, 4]
    assert registry.kinds() == [reg.kind for reg in registry.registrations]
