"""Error kinds raised by the carrier codec and its image glue."""


class AlphaVeilError(ValueError):
    """Base class for every failure that ends a run."""


class UnsupportedColorModel(AlphaVeilError):
    def __init__(self, mode: str = "") -> None:
        detail = f" (image mode '{mode}')" if mode else ""
        super().__init__(f"unsupported color model{detail}; an RGBA8 image is required")


class InsufficientCapacity(AlphaVeilError):
    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            f"there is not enough free space in the image: "
            f"{required} bytes required, {available} bytes available"
        )


class CorruptPayload(AlphaVeilError):
    """Header missing, payload shorter than declared, or undecodable text."""


class UnsupportedOutputFormat(AlphaVeilError):
    def __init__(self, output_format: str) -> None:
        self.output_format = output_format
        super().__init__(
            f"unsupported image output format '{output_format}'. Use png or tiff."
        )
