"""
Message dispatcher for the ctags language server.

The dispatcher owns the service state and routes one decoded message at a
time to its handler. It is also the error boundary: a failed request is
logged and answered with an empty result, a failed notification is logged
and dropped. Nothing raised by a handler reaches the message loop.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple, Type

from lsprotocol import converters, types
from pygls.capabilities import ServerCapabilitiesBuilder

from .exceptions import ProtocolDecodeError
from .services import DocumentStore, GotoKind, GotoService, TagIndexClient, WorkspaceRegistry
from .services.goto_service import TagSource
from .settings import ServerSettings
from .utils import handle_notification_errors, handle_request_errors

logger = logging.getLogger(__name__)

_converter = converters.get_converter()

TagSourceFactory = Callable[[ServerSettings], TagSource]


def default_tag_source(settings: ServerSettings) -> TagSource:
    return TagIndexClient(settings).query


def structure(params: Any, params_type: Type) -> Any:
    """
    Turn a raw payload into its lsprotocol type.

    Payloads that are already structured pass through untouched.

    Raises:
        ProtocolDecodeError: If the payload does not fit the type
    """
    if isinstance(params, params_type):
        return params
    try:
        return _converter.structure(params, params_type)
    except Exception as e:
        raise ProtocolDecodeError(f"Malformed {params_type.__name__} payload: {e}") from e


class Dispatcher:
    """
    Routes requests and notifications to the services.

    Args:
        settings: Settings to start with, environment defaults if omitted
        tag_source_factory: Builds the tag lookup callable from settings;
            rebuilt on ``initialize`` since options may change the backend
    """

    def __init__(self, settings: Optional[ServerSettings] = None,
                 tag_source_factory: Optional[TagSourceFactory] = None):
        self.settings = settings or ServerSettings.from_environment()
        self._tag_source_factory = tag_source_factory or default_tag_source
        self.documents = DocumentStore()
        self.workspaces = WorkspaceRegistry(self.settings.tag_patterns)
        self.goto_service = GotoService(
            self.documents, self.workspaces, self._tag_source_factory(self.settings)
        )
        self._shutdown = threading.Event()

        self._requests: Dict[str, Callable[[Any], Any]] = {
            types.INITIALIZE: self.initialize,
            types.SHUTDOWN: self.shutdown,
            types.TEXT_DOCUMENT_DEFINITION: self.definition,
            types.TEXT_DOCUMENT_DECLARATION: self.declaration,
            types.TEXT_DOCUMENT_IMPLEMENTATION: self.implementation,
        }
        self._notifications: Dict[str, Callable[[Any], None]] = {
            types.TEXT_DOCUMENT_DID_OPEN: self.did_open,
            types.TEXT_DOCUMENT_DID_CHANGE: self.did_change,
            types.TEXT_DOCUMENT_DID_CLOSE: self.did_close,
            types.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS: self.did_change_workspace_folders,
        }

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown.is_set()

    @property
    def position_encoding(self) -> str:
        return self.documents.position_encoding

    @position_encoding.setter
    def position_encoding(self, encoding: str) -> None:
        # Cursor positions in and locations out must use the same unit
        self.documents.position_encoding = encoding
        self.goto_service.resolver.position_encoding = encoding

    def dispatch(self, method: str, params: Any = None) -> Any:
        """
        Handle one message.

        Returns:
            The request result, or None for notifications, unknown methods,
            and anything received after shutdown
        """
        if self.shutdown_requested and method != types.EXIT:
            logger.info(f"Shutdown requested, ignoring {method}")
            return None

        if method in self._requests:
            logger.info(f"Received request: {method}")
            return self._requests[method](params)
        if method in self._notifications:
            self._notifications[method](params)
            return None

        logger.info(f"Received unhandled message: {method}")
        return None

    def run(self, messages: Iterable[Tuple[str, Any]]) -> Iterator[Tuple[str, Any]]:
        """
        Consume decoded messages one at a time until shutdown.

        This is the transport-independent loop, used by tests and by callers
        embedding the dispatcher behind their own transport. Under pygls the
        feature handlers in ``server.create_server`` call ``dispatch``
        directly and this loop is not used.

        Yields:
            (method, result) for every request handled
        """
        for method, params in messages:
            if self.shutdown_requested:
                logger.info("Shutdown requested, exiting...")
                break
            result = self.dispatch(method, params)
            if method in self._requests:
                yield method, result

    # Requests

    @handle_request_errors(default=lambda: None)
    def initialize(self, params: Any) -> None:
        params = structure(params, types.InitializeParams)

        # Same choice pygls advertises in the initialize result
        self.position_encoding = ServerCapabilitiesBuilder.choose_position_encoding(params.capabilities)
        logger.info(f"Position encoding: {self.position_encoding}")

        self.settings = ServerSettings.from_initialization_options(params.initialization_options)
        logger.info(f"Initialize tag patterns: {self.settings.tag_patterns}")
        self.goto_service.tag_source = self._tag_source_factory(self.settings)
        self.workspaces.reset(self.settings.tag_patterns)

        if params.workspace_folders:
            for folder in params.workspace_folders:
                self.workspaces.add(folder)
        elif params.root_uri:
            self.workspaces.add(types.WorkspaceFolder(uri=params.root_uri, name="root"))

        logger.info(f"Initializing {len(self.workspaces.roots())} workspaces")

    def shutdown(self, params: Any = None) -> None:
        self._shutdown.set()
        logger.info("Shutdown requested")

    @handle_request_errors(default=list)
    def definition(self, params: Any):
        params = structure(params, types.DefinitionParams)
        return self._goto(GotoKind.DEFINITION, params)

    @handle_request_errors(default=list)
    def declaration(self, params: Any):
        params = structure(params, types.DeclarationParams)
        return self._goto(GotoKind.DECLARATION, params)

    @handle_request_errors(default=list)
    def implementation(self, params: Any):
        params = structure(params, types.ImplementationParams)
        return self._goto(GotoKind.IMPLEMENTATION, params)

    def _goto(self, goto_kind: GotoKind, params):
        return self.goto_service.goto(goto_kind, params.text_document.uri, params.position)

    # Notifications

    @handle_notification_errors
    def did_open(self, params: Any) -> None:
        params = structure(params, types.DidOpenTextDocumentParams)
        self.documents.open(params.text_document.uri, params.text_document.text)

    @handle_notification_errors
    def did_change(self, params: Any) -> None:
        params = structure(params, types.DidChangeTextDocumentParams)
        self.documents.change(params.text_document.uri, params.content_changes)

    @handle_notification_errors
    def did_close(self, params: Any) -> None:
        params = structure(params, types.DidCloseTextDocumentParams)
        self.documents.close(params.text_document.uri)

    @handle_notification_errors
    def did_change_workspace_folders(self, params: Any) -> None:
        params = structure(params, types.DidChangeWorkspaceFoldersParams)
        for folder in params.event.removed:
            self.workspaces.remove(folder)
        for folder in params.event.added:
            self.workspaces.add(folder)
