import pytest

from prophecy.services.permissions import PermissionRegistrar, Permissioned, sealed_handle

from conftest import ALICE, BOB, CONTRACT


@pytest.fixture
def registrar(fhe):
    return PermissionRegistrar(fhe, CONTRACT)


class TestPermissionRegistrar:

    def test_permit_always_includes_ledger(self, registrar, fhe):
        handle = fhe.as_euint64(1)
        permitted = registrar.permit(handle, ALICE)

        assert permitted.handle == handle
        assert permitted.viewers == frozenset({CONTRACT, ALICE})
        assert set(registrar.pending) == {(handle, CONTRACT), (handle, ALICE)}

    def test_grants_applied_only_on_commit(self, registrar, fhe):
        handle = fhe.as_euint64(1)
        registrar.permit(handle, ALICE)
        assert not fhe.is_allowed(handle, ALICE)

        assert registrar.commit() == 2
        assert fhe.is_allowed(handle, ALICE)
        assert fhe.is_allowed(handle, CONTRACT)
        assert registrar.pending == ()

    def test_discard_grants_nothing(self, registrar, fhe):
        handle = fhe.as_euint64(1)
        registrar.permit(handle, ALICE)
        registrar.discard()

        assert registrar.pending == ()
        assert registrar.commit() == 0
        assert not fhe.is_allowed(handle, ALICE)


class TestSealedHandle:

    def test_unwraps_permissioned_value(self):
        value = Permissioned(handle="0xabc", viewers=frozenset({CONTRACT, ALICE}))
        assert sealed_handle(value, ALICE) == "0xabc"

    def test_bare_handle_rejected(self, fhe):
        with pytest.raises(TypeError):
            sealed_handle(fhe.as_euint64(1), ALICE)

    def test_missing_viewer_rejected(self):
        value = Permissioned(handle="0xabc", viewers=frozenset({CONTRACT}))
        with pytest.raises(PermissionError):
            sealed_handle(value, BOB)
