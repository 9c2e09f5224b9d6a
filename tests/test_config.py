"""Tests for gloss.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from gloss.config import Config, ConfigResolver, OutputConfig, infer_path_mode, load_config
from gloss.errors import ConfigError
from gloss.models import (
    AbsentFieldMode,
    FieldNaming,
    FileConfig,
    FnNamingOverride,
    OutputOverride,
    PathMode,
    TypeDecl,
)
from tests._fixtures.project_builder import ProjectBuilder


def _decl(**overrides) -> TypeDecl:
    return TypeDecl(name="User", module_path="models/user", constructors=(), **overrides)


def test_load_config_returns_empty_document_when_missing(tmp_path: Path) -> None:
    document = load_config(tmp_path)

    assert document.model_fields_set == set()
    assert Config().merged(document) == Config()


def test_load_config_parses_expected_fields(project: ProjectBuilder) -> None:
    project.write(
        {
            "gloss.toml": """
            field_naming_strategy = "camel_case"
            absent_field_mode = "maybe_absent"
            decoder_unknown_variant_message = "Unknown {type}"

            [output]
            directory = "@/generated"
            separate_encoder_decoder = true

            [fn_naming]
            decoder_function_naming = "decode_{type_snake}"
            """
        }
    )

    config = Config().merged(load_config(project.root))

    assert config.field_naming is FieldNaming.CAMEL_CASE
    assert config.absent_field_mode is AbsentFieldMode.MAYBE_ABSENT
    assert config.decoder_unknown_variant_message == "Unknown {type}"
    assert config.output.directory == "@/generated"
    assert config.output.separate_encoder_decoder is True
    assert config.output.generated_file_naming == "{module}_gloss.gleam"
    assert config.fn_naming.decoder_function_naming == "decode_{type_snake}"
    assert config.fn_naming.encoder_function_naming == "{type_snake}_to_{backend}"


def test_load_config_rejects_invalid_values(project: ProjectBuilder) -> None:
    project.write({"gloss.toml": 'field_naming_strategy = "kebab"\n'})

    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(project.root)


def test_load_config_rejects_malformed_toml(project: ProjectBuilder) -> None:
    project.write({"gloss.toml": "[output\n"})

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(project.root)


def test_cascade_closest_document_wins(project: ProjectBuilder) -> None:
    project.write(
        {
            "gloss.toml": """
            field_naming_strategy = "camel_case"

            [fn_naming]
            encoder_function_naming = "root_{type_snake}"
            """,
            "src/gloss.toml": """
            [fn_naming]
            encoder_function_naming = "src_{type_snake}"
            """,
            "src/models/gloss.toml": """
            absent_field_mode = "maybe_absent"
            """,
        }
    )
    resolver = ConfigResolver(project.root)

    config = resolver.load_cascaded(project.root / "src" / "models" / "user.gleam")

    assert config.field_naming is FieldNaming.CAMEL_CASE
    assert config.absent_field_mode is AbsentFieldMode.MAYBE_ABSENT
    assert config.fn_naming.encoder_function_naming == "src_{type_snake}"


def test_cascade_explicit_default_value_still_overrides(project: ProjectBuilder) -> None:
    project.write(
        {
            "gloss.toml": """
            field_naming_strategy = "camel_case"

            [output]
            separate_files = false
            """,
            "src/gloss.toml": """
            field_naming_strategy = "snake_case"

            [output]
            separate_files = true
            """,
        }
    )

    config = ConfigResolver(project.root).load_cascaded(project.root / "src" / "user.gleam")

    assert config.field_naming is FieldNaming.SNAKE_CASE
    assert config.output.separate_files is True


def test_unset_fields_do_not_override_parent(project: ProjectBuilder) -> None:
    project.write(
        {
            "gloss.toml": """
            [fn_naming]
            decoder_function_naming = "{type_snake}_from_json"
            """,
            "src/gloss.toml": """
            [output]
            directory = "gen"
            """,
        }
    )

    config = ConfigResolver(project.root).load_cascaded(project.root / "src" / "user.gleam")

    assert config.fn_naming.decoder_function_naming == "{type_snake}_from_json"
    assert config.output.directory == "gen"


@pytest.mark.parametrize(
    ("directory", "default", "expected"),
    [
        ("@/generated", PathMode.FILE_RELATIVE, PathMode.PROJECT_RELATIVE),
        ("/generated", PathMode.FILE_RELATIVE, PathMode.PROJECT_RELATIVE),
        ("./generated", PathMode.PROJECT_RELATIVE, PathMode.FILE_RELATIVE),
        ("generated", PathMode.PROJECT_RELATIVE, PathMode.PROJECT_RELATIVE),
        ("generated", PathMode.FILE_RELATIVE, PathMode.FILE_RELATIVE),
    ],
)
def test_infer_path_mode(directory: str, default: PathMode, expected: PathMode) -> None:
    assert infer_path_mode(directory, default) is expected


@pytest.mark.parametrize(
    ("directory", "expected"),
    [("@/gen", "gen"), ("@gen", "gen"), ("/gen", "gen"), ("./gen", "gen"), ("gen", "gen"), (None, None)],
)
def test_clean_directory(directory, expected) -> None:
    assert OutputConfig(directory=directory).clean_directory() == expected


def test_path_mode_defaults(project: ProjectBuilder) -> None:
    resolver = ConfigResolver(project.root)
    target = project.root / "src" / "user.gleam"

    without_directory = resolver.for_file(target, FileConfig())
    assert without_directory.path_mode is PathMode.FILE_RELATIVE

    project.write({"gloss.toml": '[output]\ndirectory = "generated"\n'})
    document_directory = ConfigResolver(project.root).for_file(target, FileConfig())
    assert document_directory.path_mode is PathMode.PROJECT_RELATIVE

    directive_directory = ConfigResolver(project.root).for_file(
        target, FileConfig(output_override=OutputOverride(directory="generated"))
    )
    assert directive_directory.path_mode is PathMode.FILE_RELATIVE


def test_file_then_type_overrides_layer(project: ProjectBuilder) -> None:
    project.write(
        {
            "gloss.toml": """
            decoder_unknown_variant_message = "root"

            [output]
            directory = "@/generated"
            """
        }
    )
    resolver = ConfigResolver(project.root)
    file_context = resolver.for_file(
        project.root / "src" / "user.gleam",
        FileConfig(
            output_override=OutputOverride(separate_encoder_decoder=True),
            unknown_variant_message="file",
            fn_naming_override=FnNamingOverride(decoder_function_naming="file_{type_snake}"),
        ),
    )

    assert file_context.config.output.directory == "@/generated"
    assert file_context.config.output.separate_encoder_decoder is True
    assert file_context.path_mode is PathMode.PROJECT_RELATIVE
    assert file_context.unknown_variant_message == "file"

    type_context = resolver.for_type(
        file_context,
        _decl(
            output_override=OutputOverride(directory="./local"),
            unknown_variant_message="type",
            fn_naming_override=FnNamingOverride(encoder_function_naming="enc_{type_snake}"),
        ),
    )

    assert type_context.config.output.directory == "./local"
    assert type_context.config.output.separate_encoder_decoder is True
    assert type_context.path_mode is PathMode.FILE_RELATIVE
    assert type_context.unknown_variant_message == "type"
    assert type_context.config.fn_naming.decoder_function_naming == "file_{type_snake}"
    assert type_context.config.fn_naming.encoder_function_naming == "enc_{type_snake}"

    untouched = resolver.for_type(file_context, _decl())
    assert untouched.config == file_context.config
    assert untouched.path_mode is PathMode.PROJECT_RELATIVE
