#
#
#

from octodns.provider import ProviderException


class PorkbunClientException(ProviderException):
    pass


class PorkbunTransportError(PorkbunClientException):
    pass


class PorkbunTimeout(PorkbunTransportError):
    pass


class PorkbunDecodeError(PorkbunClientException):
    pass


class PorkbunApiFailure(PorkbunClientException):
    def __init__(self, message=None, status='FAILURE', status_code=None):
        self.message = message
        self.status = status
        self.status_code = status_code
        super().__init__(message or f'Registrar returned {status}')


class PorkbunImportIdError(PorkbunClientException):
    def __init__(self, import_id):
        self.import_id = import_id
        super().__init__(
            'Expected import identifier with format: domain:subdomain. '
            f'Got: {import_id!r}'
        )


class PorkbunConfigError(PorkbunClientException):
    pass
