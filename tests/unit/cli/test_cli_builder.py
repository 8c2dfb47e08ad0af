"""Unit tests for the schema-driven CLI builder and parse_options."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import argparse
from pathlib import Path

import pytest

from readbin.cli.builder import (
    EXIT_ERROR,
    EXIT_FILE_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    ParseResult,
    ReadbinCLIBuilder,
    create_parser,
    get_exit_code_for_exception,
    parse_options,
)
from readbin.exceptions import (
    ConfigFileError,
    FileNotFoundError,
    InvalidValueError,
    MissingRequiredArgumentError,
    NoOptionsProvidedError,
    UnrecognizedArgumentError,
)
from readbin.options.model import Options
from readbin.options.values import (
    DemangleInternal,
    DemangleProgram,
    DumpFormat,
    Explicit,
    IdaExecutable,
    IdaSearchDefault,
    Implicit,
    LabelFormat,
    SymbolFormat,
)


def parse(argv, tmp_path=None, env=None):
    """Parse ``argv`` with an empty environment and return the result."""
    return parse_options(argv, env=env or {}, cwd=tmp_path)


@pytest.mark.unit
@pytest.mark.cli
class TestDefaults:
    """Test the value of every omitted option."""

    def test_only_file(self, binary_file):
        """Test that a bare input file yields the documented defaults."""
        result = parse([str(binary_file)])
        assert result.ok
        assert result.options == Options(filename=binary_file)

    def test_documented_defaults(self, binary_file):
        """Test the individual default values."""
        options = parse([str(binary_file)]).unwrap()
        assert options.loader == "llvm"
        assert options.bw_length == 16
        assert options.bw_threshold == 0.9
        assert options.labels == (LabelFormat.WITH_NAME,)
        assert options.dump == ()
        assert options.load == ()
        assert options.phoenix is None
        assert options.demangle is None
        assert options.use_ida is None
        assert options.verbose is False
        assert options.log_level == "WARNING"

    def test_filename_is_path(self, binary_file):
        """Test the input file is kept as a Path."""
        assert parse([str(binary_file)]).unwrap().filename == Path(str(binary_file))


@pytest.mark.unit
@pytest.mark.cli
class TestValueOptions:
    """Test single-value, flag and repeatable options."""

    def test_flags(self, binary_file):
        """Test every boolean flag, long and short."""
        argv = [
            str(binary_file),
            "-n",
            "--keep-alive",
            "--no-inline",
            "--keep-const",
            "--no-optimizations",
            "-v",
            "--no-byteweight",
        ]
        options = parse(argv).unwrap()
        assert options.no_resolve
        assert options.keep_alive
        assert options.no_inline
        assert options.keep_consts
        assert options.no_optimizations
        assert options.verbose
        assert options.no_byteweight

    def test_numbers(self, binary_file):
        """Test integer and float conversion."""
        options = parse([str(binary_file), "--byteweight-length", "20", "--byteweight-threshold=0.5"]).unwrap()
        assert options.bw_length == 20
        assert options.bw_threshold == 0.5

    def test_strings(self, binary_file):
        """Test plain string options."""
        options = parse(
            [str(binary_file), "--loader", "elf", "--binary=x86", "--emit-ida-script", "out.py"]
        ).unwrap()
        assert options.loader == "elf"
        assert options.binary == "x86"
        assert options.emit_ida_script == "out.py"

    def test_existing_file_options(self, binary_file, signatures_file):
        """Test file options naming existing files."""
        options = parse([str(binary_file), "-s", str(binary_file), "--sigs", str(signatures_file)]).unwrap()
        assert options.symsfile == binary_file
        assert options.sigsfile == signatures_file

    def test_repeatable_order(self, binary_file):
        """Test repeatable options keep command line order."""
        options = parse([str(binary_file), "-l", "b", "--load=a", "-L", "/opt", "--load-path", "/usr"]).unwrap()
        assert options.load == ("b", "a")
        assert options.load_path == ("/opt", "/usr")

    def test_labels_select(self, binary_file):
        """Test the label flags accumulate into one field."""
        options = parse([str(binary_file), "--labels-with-bil", "--labels-with-asm"]).unwrap()
        assert options.labels == (LabelFormat.WITH_BIL, LabelFormat.WITH_ASM)

    def test_file_after_options(self, binary_file):
        """Test the positional may appear anywhere."""
        options = parse(["-v", "--loader", "elf", str(binary_file)]).unwrap()
        assert options.filename == binary_file
        assert options.loader == "elf"

    def test_log_level_case_insensitive(self, binary_file):
        """Test the log level is normalized to upper case."""
        assert parse([str(binary_file), "--log-level", "debug"]).unwrap().log_level == "DEBUG"

    def test_single_value_last_wins(self, binary_file):
        """Test that a repeated single-value option keeps its last value."""
        assert parse([str(binary_file), "--loader", "a", "--loader", "b"]).unwrap().loader == "b"


@pytest.mark.unit
@pytest.mark.cli
class TestPresenceWithoutArgument:
    """Test flags that may be given bare or with an attached value."""

    def test_dump_bare_and_explicit(self, binary_file):
        """Test bare --dump means asm and values keep their order."""
        options = parse([str(binary_file), "--dump", "--dump=bil", "-dbil", "-d"]).unwrap()
        assert options.dump == (DumpFormat.ASM, DumpFormat.BIL, DumpFormat.BIL, DumpFormat.ASM)

    def test_print_symbols(self, binary_file):
        """Test bare -p means name."""
        options = parse([str(binary_file), "-p", "-paddr", "--print-symbols=size"]).unwrap()
        assert options.print_symbols == (SymbolFormat.NAME, SymbolFormat.ADDR, SymbolFormat.SIZE)

    def test_bare_flag_before_option(self, binary_file):
        """Test that a flag followed by another option takes its bare default."""
        options = parse(["--dump", "-v", str(binary_file)]).unwrap()
        assert options.filename == binary_file
        assert options.dump == (DumpFormat.ASM,)
        assert options.verbose

    def test_separate_value(self, binary_file):
        """Test that a following non-option token is taken as the value."""
        options = parse([str(binary_file), "--phoenix", "out", "--dump", "bil", "-p", "addr"]).unwrap()
        assert options.phoenix == Explicit("out")
        assert options.dump == (DumpFormat.BIL,)
        assert options.print_symbols == (SymbolFormat.ADDR,)

    def test_separate_value_demangle(self, binary_file):
        """Test an external demangler given as the next token."""
        options = parse([str(binary_file), "--demangle", "c++filt", "--use-ida", "idaq64"]).unwrap()
        assert options.demangle == Explicit(DemangleProgram("c++filt"))
        assert options.use_ida == Explicit(IdaExecutable("idaq64"))

    def test_flag_before_file_takes_file(self, binary_file):
        """Test that a vopt flag directly before FILE takes it as its value."""
        result = parse(["--dump", str(binary_file)])
        assert isinstance(result.error, InvalidValueError)

    def test_phoenix_bare_uses_cwd(self, binary_file, tmp_path):
        """Test bare --phoenix stands for the working directory."""
        options = parse([str(binary_file), "--phoenix"], tmp_path=tmp_path).unwrap()
        assert options.phoenix == Implicit(str(tmp_path))

    def test_phoenix_explicit(self, binary_file):
        """Test --phoenix=DIR keeps the value as explicit."""
        assert parse([str(binary_file), "--phoenix=out"]).unwrap().phoenix == Explicit("out")

    def test_phoenix_explicit_cwd_differs_from_bare(self, binary_file, tmp_path):
        """Test that an explicit value equal to the bare default stays distinguishable."""
        bare = parse([str(binary_file), "--phoenix"], tmp_path=tmp_path).unwrap()
        explicit = parse([str(binary_file), f"--phoenix={tmp_path}"], tmp_path=tmp_path).unwrap()
        assert bare.phoenix != explicit.phoenix

    def test_demangle(self, binary_file):
        """Test bare and explicit --demangle."""
        assert parse([str(binary_file), "--demangle"]).unwrap().demangle == Implicit(DemangleInternal())
        assert parse([str(binary_file), "--demangle=c++filt"]).unwrap().demangle == Explicit(
            DemangleProgram("c++filt")
        )

    def test_use_ida(self, binary_file):
        """Test bare and explicit --use-ida."""
        assert parse([str(binary_file), "--use-ida"]).unwrap().use_ida == Implicit(IdaSearchDefault())
        assert parse([str(binary_file), "--use-ida=idaq64"]).unwrap().use_ida == Explicit(IdaExecutable("idaq64"))

    def test_tokens_after_double_dash_not_rewritten(self, binary_file):
        """Test that nothing after -- is treated as a bare flag."""
        result = parse(["--", "--dump"])
        assert isinstance(result.error, FileNotFoundError)

    def test_normalize_argv(self):
        """Test the rewrite of bare vopt tokens."""
        builder = ReadbinCLIBuilder(env={})
        argv = ["--dump", "-dbil", "-p", "--phoenix=x", "--demangle", "c++filt", "--use-ida", "--", "--dump"]
        assert builder.normalize_argv(argv) == [
            "--dump:bare",
            "-dbil",
            "-p:bare",
            "--phoenix=x",
            "--demangle",
            "c++filt",
            "--use-ida:bare",
            "--",
            "--dump",
        ]

    def test_normalize_argv_last_token(self):
        """Test a vopt flag at the end of the line is bare."""
        assert ReadbinCLIBuilder(env={}).normalize_argv(["ls", "--phoenix"]) == ["ls", "--phoenix:bare"]


@pytest.mark.unit
@pytest.mark.cli
class TestParseFailures:
    """Test the failure categories reported by parse_options."""

    def test_missing_file(self):
        """Test that an absent FILE is a missing argument."""
        result = parse(["--verbose"])
        assert not result.ok
        assert isinstance(result.error, MissingRequiredArgumentError)
        assert result.error.option == "FILE"

    def test_empty_command_line(self):
        """Test the empty command line."""
        assert isinstance(parse([]).error, MissingRequiredArgumentError)

    def test_unknown_option(self, binary_file):
        """Test that an unknown option is unrecognized."""
        result = parse([str(binary_file), "--bogus"])
        assert isinstance(result.error, UnrecognizedArgumentError)
        assert result.error.arguments == ["--bogus"]

    def test_no_abbreviations(self, binary_file):
        """Test that option prefixes are not accepted."""
        assert isinstance(parse([str(binary_file), "--verb"]).error, UnrecognizedArgumentError)

    def test_extra_positional(self, binary_file):
        """Test that a second positional is unrecognized."""
        result = parse([str(binary_file), "extra"])
        assert isinstance(result.error, UnrecognizedArgumentError)
        assert result.error.arguments == ["extra"]

    def test_bad_integer(self, binary_file):
        """Test that a non-numeric length is an invalid value."""
        result = parse([str(binary_file), "--byteweight-length", "abc"])
        assert isinstance(result.error, InvalidValueError)
        assert "--byteweight-length" in result.diagnostic

    def test_bad_float(self, binary_file):
        """Test that a non-numeric threshold is an invalid value."""
        assert isinstance(parse([str(binary_file), "--byteweight-threshold=high"]).error, InvalidValueError)

    def test_bad_enum_tag(self, binary_file):
        """Test that an unknown dump format is an invalid value."""
        assert isinstance(parse([str(binary_file), "--dump=foo"]).error, InvalidValueError)

    def test_bad_log_level(self, binary_file):
        """Test that the log level must be a known name."""
        assert isinstance(parse([str(binary_file), "--log-level", "loud"]).error, InvalidValueError)

    def test_missing_value(self, binary_file):
        """Test that a value option at the end of the line is an invalid value."""
        assert isinstance(parse([str(binary_file), "--loader"]).error, InvalidValueError)

    def test_nonexistent_file(self, tmp_path):
        """Test that a missing input file is a file error."""
        result = parse([str(tmp_path / "missing")])
        assert isinstance(result.error, FileNotFoundError)
        assert result.error.option == "FILE"

    def test_directory_as_file(self, tmp_path):
        """Test that a directory is rejected as input file."""
        result = parse([str(tmp_path)])
        assert isinstance(result.error, FileNotFoundError)
        assert "directory" in result.diagnostic

    def test_nonexistent_syms(self, binary_file, tmp_path):
        """Test that a missing --syms file is a file error."""
        result = parse([str(binary_file), "--syms", str(tmp_path / "missing.txt")])
        assert isinstance(result.error, FileNotFoundError)
        assert result.error.option == "--syms"

    def test_no_partial_options(self, binary_file):
        """Test that a failed parse carries no options."""
        result = parse([str(binary_file), "--bogus"])
        assert result.options is None
        with pytest.raises(UnrecognizedArgumentError):
            result.unwrap()

    def test_help_exits(self, capsys):
        """Test that --help prints usage and exits successfully."""
        with pytest.raises(SystemExit) as exc_info:
            parse(["--help"])
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "usage: bap" in out
        assert ":bare" not in out


@pytest.mark.unit
@pytest.mark.cli
class TestPluginPassThrough:
    """Test that plugin flags never reach the strict parse."""

    def test_plugin_flag_removed(self, binary_file):
        """Test a glued plugin flag is accepted once the plugin is loaded."""
        result = parse([str(binary_file), "-l", "foo", "--foo-flag=x"])
        assert result.ok
        assert result.plugins == ("foo",)
        assert result.options.load == ("foo",)

    def test_plugin_flag_without_load(self, binary_file):
        """Test a plugin flag for a plugin that was not loaded is rejected."""
        result = parse([str(binary_file), "--foo-flag=x"])
        assert isinstance(result.error, UnrecognizedArgumentError)
        assert result.plugins == ()

    def test_similar_name_not_removed(self, binary_file):
        """Test that --foobar is still checked against the schema."""
        result = parse([str(binary_file), "-lfoo", "--foobar"])
        assert isinstance(result.error, UnrecognizedArgumentError)
        assert result.plugins == ("foo",)


@pytest.mark.unit
@pytest.mark.cli
class TestEnvironmentDefaults:
    """Test BAP_<DEST> default overrides."""

    def test_env_string(self, binary_file):
        """Test an environment value replaces a string default."""
        assert parse([str(binary_file)], env={"BAP_LOADER": "elf"}).unwrap().loader == "elf"

    def test_env_flag(self, binary_file):
        """Test an environment value turns a flag on."""
        assert parse([str(binary_file)], env={"BAP_VERBOSE": "1"}).unwrap().verbose is True

    def test_command_line_wins(self, binary_file):
        """Test the command line overrides the environment."""
        options = parse([str(binary_file), "--byteweight-length", "8"], env={"BAP_BW_LENGTH": "32"}).unwrap()
        assert options.bw_length == 8

    def test_environment_not_read_implicitly(self, binary_file, monkeypatch):
        """Test that os.environ is ignored unless passed in."""
        monkeypatch.setenv("BAP_LOADER", "elf")
        assert parse_options([str(binary_file)]).unwrap().loader == "llvm"


@pytest.mark.unit
@pytest.mark.cli
class TestBuilderParser:
    """Test the generated argparse parser."""

    def test_create_parser(self):
        """Test the parser program name and error behaviour."""
        parser = create_parser(env={})
        assert parser.prog == "bap"
        with pytest.raises(argparse.ArgumentError):
            parser.parse_args(["--byteweight-length", "abc"])

    def test_help_lists_options(self):
        """Test that every long option appears in the help text."""
        help_text = create_parser(env={}).format_help()
        for flag in ("--syms", "--dump", "--print-symbols", "--use-ida", "--load-path", "--labels-with-bil"):
            assert flag in help_text

    def test_parse_result_unwrap_empty(self):
        """Test unwrapping a result with neither options nor error."""
        with pytest.raises(NoOptionsProvidedError):
            ParseResult().unwrap()


@pytest.mark.unit
@pytest.mark.cli
class TestExitCodes:
    """Test the mapping from failures to exit codes."""

    def test_constants(self):
        """Test the exit code values."""
        assert (EXIT_SUCCESS, EXIT_ERROR, EXIT_VALIDATION_ERROR, EXIT_FILE_ERROR) == (0, 1, 3, 4)

    @pytest.mark.parametrize(
        "error,code",
        [
            (FileNotFoundError("/x", option="FILE"), 4),
            (MissingRequiredArgumentError("FILE"), 3),
            (InvalidValueError("bad"), 3),
            (UnrecognizedArgumentError(["--bogus"]), 3),
            (ConfigFileError("bad"), 3),
            (RuntimeError("boom"), 1),
        ],
    )
    def test_mapping(self, error, code):
        """Test each failure category maps to its exit code."""
        assert get_exit_code_for_exception(error) == code
