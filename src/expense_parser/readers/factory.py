import importlib
from pathlib import Path
from typing import Optional, Dict, Type, Any
from expense_parser.readers.base import DocumentReader
from expense_parser.config.settings import ConfigLoader

class ReaderFactory:
    """
    Factory for creating document readers.

    Uses a registry pattern to map file extensions to DocumentReader classes.
    """

    _locked = False
    _registry: Dict[str, Type[DocumentReader]] = {}

    @classmethod
    def register(cls, extension: str, reader_class: Type[DocumentReader]) -> None:
        """
        Register a reader for a file extension

        Args:
            extension: File suffix with or without the dot (e.g. '.pdf', 'csv')
            reader_class: The reader class

        Raises:
            ValueError: If the extension is already registered
            TypeError: If reader_class doesn't inherit from DocumentReader
            RuntimeError: If the reader registry is locked

        Example:
            ReaderFactory.register('.pdf', PdfTextReader)
        """

        if cls._locked:
            raise RuntimeError("Registry is locked, cannot add more readers")

        extension = cls._normalize(extension)
        if extension in cls._registry:
            raise ValueError(f"Reader for '{extension}' is already registered")

        if not issubclass(reader_class, DocumentReader):
            raise TypeError(f"{reader_class} must inherit from DocumentReader")

        cls._registry[extension] = reader_class

    @classmethod
    def lock_registry(cls):
        """Prevent further registration (call after app initialization)"""
        cls._locked = True

    @classmethod
    def create_reader(cls, extension: str) -> DocumentReader:
        """
        Create a reader instance for a file extension.

        Raises:
            ValueError: If no reader registered for this extension
        """
        extension = cls._normalize(extension)
        if extension not in cls._registry:
            available = ', '.join(cls._registry.keys())
            raise ValueError(
                f"No reader registered for '{extension}'. "
                f"Supported file types: {available}"
            )

        return cls._registry[extension]()

    @classmethod
    def for_file(cls, filepath: str) -> DocumentReader:
        """
        Create the reader matching a file's suffix.

        Example:
            reader = ReaderFactory.for_file('statement.pdf')
            text = reader.read_text('statement.pdf')
        """
        return cls.create_reader(Path(filepath).suffix)

    @classmethod
    def get_supported_extensions(cls) -> list[str]:
        """Return list of all registered extensions"""
        return list(cls._registry.keys())

    @classmethod
    def load_readers_from_config(
        cls,
        config: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Load and register readers from configuration

        Args:
            config: Optional config dict. If None, loads from ConfigLoader.
                Useful for testing with custom configs.

            Example (production):
                ReaderFactory.load_readers_from_config()

            Example (testing):
                test_config = {"readers": [...]}
                ReaderFactory.load_readers_from_config(config=test_config)
        """
        if config is None:
            config = ConfigLoader.load_readers_config()

        for reader_config in config['readers']:
            module_path, class_name = str(reader_config['class']).rsplit('.', 1)
            module = importlib.import_module(module_path)
            reader_class = getattr(module, class_name)

            for extension in reader_config['extensions']:
                cls.register(extension, reader_class)

        cls.lock_registry()

    @staticmethod
    def _normalize(extension: str) -> str:
        extension = extension.strip().lower()
        return extension if extension.startswith('.') else f'.{extension}'
