class RegistryLockError(Exception):
    pass


class UnknownDomainError(RegistryLockError):
    pass


class DomainAlreadyLockedError(RegistryLockError):
    pass


class DomainAlreadyUnlockedError(RegistryLockError):
    pass


class DomainNotLockedError(RegistryLockError):
    pass


class NoLockOnRecordError(RegistryLockError):
    pass


class ConflictingPendingActionError(RegistryLockError):
    pass


class RequestExpiredError(RegistryLockError):
    pass


class InvalidVerificationCodeError(RegistryLockError):
    pass


class RegistrarMismatchError(RegistryLockError):
    pass


class AdminLockRequiresAdminError(RegistryLockError):
    pass


class AdminUnlockRequiresAdminError(AdminLockRequiresAdminError):
    pass


class RegistrarAccessDeniedError(RegistryLockError):
    pass


class RegistryLockNotAllowedError(RegistryLockError):
    pass
