"""
Source languages and the toolchain images that grade them.

Every supported language has exactly one entry in DEFAULT_TOOLCHAINS.
Adding a language means adding an enum member and its entry here.
"""
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional

from grading.errors import ConfigurationError, UnsupportedLanguageError


class SourceLanguage(str, Enum):
    C = "c"
    CPP = "cpp"


@dataclass(frozen=True)
class Toolchain:
    image: str
    entrypoint: str
    extensions: FrozenSet[str]
    # Environment variable carrying the source extension, for toolchains
    # that accept several extensions
    extension_env: Optional[str] = None


DEFAULT_TOOLCHAINS: Dict[SourceLanguage, Toolchain] = {
    SourceLanguage.C: Toolchain(
        image="gcc:7.3",
        entrypoint="c-script.sh",
        extensions=frozenset({"c"}),
    ),
    SourceLanguage.CPP: Toolchain(
        image="gcc:7.3",
        entrypoint="cpp-script.sh",
        extensions=frozenset({"cpp", "cc", "cxx", "c++"}),
        extension_env="CodeFileExt",
    ),
}


def build_toolchains(
    image_overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[SourceLanguage, Toolchain]] = None,
) -> Dict[SourceLanguage, Toolchain]:
    toolchains = dict(DEFAULT_TOOLCHAINS if base is None else base)

    for key, image in (image_overrides or {}).items():
        try:
            language = SourceLanguage(key)
        except ValueError:
            raise ConfigurationError(f"unknown_toolchain_override: {key}") from None
        if language not in toolchains:
            raise ConfigurationError(f"toolchain_not_configured: {key}")
        toolchains[language] = replace(toolchains[language], image=image)

    validate_toolchains(toolchains)
    return toolchains


def validate_toolchains(toolchains: Mapping[SourceLanguage, Toolchain]) -> None:
    missing = [language.value for language in SourceLanguage if language not in toolchains]
    if missing:
        raise ConfigurationError(f"toolchain_missing: {', '.join(missing)}")

    seen: Dict[str, SourceLanguage] = {}
    for language, toolchain in toolchains.items():
        if not toolchain.image or not toolchain.entrypoint:
            raise ConfigurationError(f"toolchain_incomplete: {language.value}")
        for extension in toolchain.extensions:
            if extension in seen:
                raise ConfigurationError(
                    f"toolchain_extension_conflict: .{extension} claimed by "
                    f"{seen[extension].value} and {language.value}"
                )
            seen[extension] = language


def resolve_language(
    source_path: Path,
    toolchains: Mapping[SourceLanguage, Toolchain],
) -> SourceLanguage:
    extension = source_path.suffix.lstrip(".").lower()
    for language, toolchain in toolchains.items():
        if extension in toolchain.extensions:
            return language
    raise UnsupportedLanguageError(f"unsupported_language: {source_path.name}")
