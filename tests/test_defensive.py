"""
Defensive test suite.

Focused on the failures callers must be able to tell apart:
- Input validation (rejected before the oracle is contacted)
- Oracle transport errors (propagated, optionally retried)
- Oracle output errors (never turned into an empty matrix)
- Score normalization (clamping, omitted and unknown ids)
- CLI exit paths and API key
"""

import unittest
import json
import os
import sys
import tempfile
import shutil
from unittest.mock import patch, MagicMock
from io import StringIO

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))


VALID_PAYLOAD = json.dumps({
    "row_scores": {"EDS-1": 2},
    "col_scores": {"SP3-1": 3},
    "top_cells": [],
    "analysis": "Arts focus.",
})


class FailingOracle:
    """Raises a transport error for the first `failures` calls, then answers."""

    name = "failing"

    def __init__(self, failures, payload=VALID_PAYLOAD):
        self.failures = failures
        self.payload = payload
        self.calls = 0

    def score(self, request):
        from src.errors import OracleTransportError

        self.calls += 1
        if self.calls <= self.failures:
            raise OracleTransportError("Connection reset")
        return self.payload


class TempDirTestCase(unittest.TestCase):

    def setUp(self):
        """Create temporary directory"""
        self.test_dir = tempfile.mkdtemp()
        self.original_dir = os.getcwd()
        os.chdir(self.test_dir)

    def tearDown(self):
        """Clean up"""
        os.chdir(self.original_dir)
        shutil.rmtree(self.test_dir)


class TestInputValidation(TempDirTestCase):
    """Test empty input is rejected before any oracle call"""

    def test_whitespace_only_document(self):
        from src.graph import analyze_document
        from src.errors import InputError
        from nodes.score import StaticOracle

        oracle = StaticOracle(VALID_PAYLOAD)

        with patch('sys.stdout', new=StringIO()):
            with self.assertRaises(InputError):
                analyze_document("   \n\t  ", oracle=oracle)

        self.assertEqual(oracle.requests, [])

    def test_missing_document(self):
        from nodes.validate import validate
        from src.errors import InputError, AnalysisError

        with self.assertRaises(InputError) as cm:
            validate({"text": None})

        self.assertIsInstance(cm.exception, AnalysisError)

    def test_missing_input_file(self):
        """CLI exits with code 2 when the document file does not exist"""
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key"}):
            with patch('sys.argv', ['main.py', 'nonexistent.txt']):
                with patch('sys.stdout', new=StringIO()) as output:
                    with self.assertRaises(SystemExit) as cm:
                        from main import main
                        main()

        self.assertEqual(cm.exception.code, 2)
        self.assertIn("Input file not found", output.getvalue())

    def test_empty_text_argument(self):
        """CLI rejects --text with only whitespace and never scores it"""
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key"}):
            with patch('sys.argv', ['main.py', '--text', '   ']):
                with patch('nodes.score.ChatAnthropic') as mock_chat:
                    with patch('sys.stdout', new=StringIO()) as output:
                        with self.assertRaises(SystemExit) as cm:
                            from main import main
                            main()

        self.assertEqual(cm.exception.code, 2)
        self.assertIn("empty input", output.getvalue())
        mock_chat.return_value.invoke.assert_not_called()

    def test_non_utf8_file(self):
        """Binary documents must be converted to text before analysis"""
        from main import read_document
        from src.errors import InputError

        with open("scan.pdf", "wb") as f:
            f.write(b"%PDF-1.7\n\xff\xfe\x00binary")

        with self.assertRaises(InputError) as cm:
            read_document("scan.pdf")

        self.assertIn("not UTF-8 text", str(cm.exception))


class TestOracleOutputErrors(TempDirTestCase):
    """Test unusable model output is a distinct failure, never an empty matrix"""

    def assert_output_error(self, payload):
        from src.graph import analyze_document
        from src.errors import OracleOutputError
        from nodes.score import StaticOracle

        with patch('sys.stdout', new=StringIO()):
            with self.assertRaises(OracleOutputError) as cm:
                analyze_document("Valid document", oracle=StaticOracle(payload))
        return cm.exception

    def test_unparseable_text(self):
        error = self.assert_output_error("I think this aligns with EDS-5 strongly.")

        self.assertIn("Invalid JSON", str(error))
        self.assertEqual(error.raw, "I think this aligns with EDS-5 strongly.")

    def test_json_array_instead_of_object(self):
        error = self.assert_output_error("[1, 2, 3]")

        self.assertIn("Expected a JSON object", str(error))

    def test_non_numeric_score(self):
        self.assert_output_error(json.dumps({"row_scores": {"EDS-1": "high"}}))

    def test_boolean_score(self):
        """true is not a score, even though bool is an int in Python"""
        self.assert_output_error(json.dumps({"row_scores": {"EDS-1": True}}))

    def test_string_score(self):
        self.assert_output_error(json.dumps({"col_scores": {"SP3-1": "2"}}))

    def test_float_score(self):
        self.assert_output_error(json.dumps({"row_scores": {"EDS-1": 2.0}}))

    def test_string_confidence(self):
        self.assert_output_error(json.dumps({
            "top_cells": [{"row": "EDS-1", "col": "SP3-1", "why": "x", "confidence": "0.5"}]
        }))

    def test_parser_rejects_coercible_scores(self):
        """parse_scoring_response itself refuses lax conversions"""
        from nodes.parse import parse_scoring_response
        from src.errors import OracleOutputError

        for value in (True, False, "2", 2.0, None):
            with self.assertRaises(OracleOutputError):
                parse_scoring_response(json.dumps({"row_scores": {"EDS-1": value}}))

    def test_confidence_out_of_range(self):
        self.assert_output_error(json.dumps({
            "top_cells": [{"row": "EDS-1", "col": "SP3-1", "why": "x", "confidence": 1.5}]
        }))

    def test_top_cell_missing_rationale(self):
        self.assert_output_error(json.dumps({"top_cells": [{"row": "EDS-1", "col": "SP3-1"}]}))

    def test_empty_reply(self):
        self.assert_output_error("")


class TestOracleTransport(TempDirTestCase):
    """Test transport failures propagate and the optional retry policy"""

    def test_transport_error_propagates_without_retry(self):
        from src.graph import analyze_document
        from src.errors import OracleTransportError

        oracle = FailingOracle(failures=1)

        with patch('sys.stdout', new=StringIO()) as output:
            with self.assertRaises(OracleTransportError):
                analyze_document("Valid document", oracle=oracle)

        self.assertEqual(oracle.calls, 1)
        self.assertIn("Scoring request failed", output.getvalue())

    def test_retry_policy_recovers_from_transient_failure(self):
        from src.graph import create_graph, analyze_document

        oracle = FailingOracle(failures=1)

        with patch('src.graph.ORACLE_RETRY_INITIAL_INTERVAL', 0.01):
            graph = create_graph(oracle, max_attempts=3)

        with patch('sys.stdout', new=StringIO()):
            result = analyze_document("Valid document", graph=graph)

        self.assertEqual(oracle.calls, 2)
        self.assertEqual(result["alignment"]["EDS-1|SP3-1"], 2)

    def test_retry_does_not_repeat_output_errors(self):
        """Bad output is terminal even when retries are enabled"""
        from src.graph import create_graph, analyze_document
        from src.errors import OracleOutputError

        oracle = FailingOracle(failures=0, payload="not json")
        graph = create_graph(oracle, max_attempts=3)

        with patch('sys.stdout', new=StringIO()):
            with self.assertRaises(OracleOutputError):
                analyze_document("Valid document", graph=graph)

        self.assertEqual(oracle.calls, 1)

    def test_anthropic_errors_are_wrapped(self):
        from nodes.score import AnthropicOracle
        from nodes.build_request import build_scoring_request
        from src.errors import OracleTransportError
        from anthropic import APIConnectionError

        mock_error = APIConnectionError.__new__(APIConnectionError)
        mock_error.message = "Connection error"

        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key"}):
            oracle = AnthropicOracle()

        oracle._llm = MagicMock()
        oracle._llm.invoke.side_effect = mock_error

        with self.assertRaises(OracleTransportError) as cm:
            oracle.score(build_scoring_request("Valid document"))

        self.assertIs(cm.exception.__cause__, mock_error)
        self.assertIn("APIConnectionError", str(cm.exception))

    def test_oracle_base_is_abstract(self):
        """Backends must implement score()"""
        from nodes.score import ScoringOracle

        class NoScore(ScoringOracle):
            name = "incomplete"

        with self.assertRaises(TypeError):
            ScoringOracle()
        with self.assertRaises(TypeError):
            NoScore()

    def test_anthropic_reply_text_is_returned(self):
        from nodes.score import AnthropicOracle
        from nodes.build_request import build_scoring_request

        reply = MagicMock()
        reply.content = [{"type": "text", "text": VALID_PAYLOAD}]

        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key"}):
            oracle = AnthropicOracle()

        oracle._llm = MagicMock()
        oracle._llm.invoke.return_value = reply

        self.assertEqual(oracle.score(build_scoring_request("Valid document")), VALID_PAYLOAD)

        messages = oracle._llm.invoke.call_args[0][0]
        self.assertEqual([m["role"] for m in messages], ["system", "user"])


class TestScoreNormalization(TempDirTestCase):
    """Test clamping and handling of omitted or unknown ids"""

    def run_pipeline(self, payload):
        from src.graph import analyze_document
        from nodes.score import StaticOracle

        with patch('sys.stdout', new=StringIO()) as output:
            result = analyze_document("Valid document", oracle=StaticOracle(payload))
        return result, output.getvalue()

    def test_out_of_range_scores_are_clamped(self):
        result, output = self.run_pipeline(json.dumps({
            "row_scores": {"EDS-1": 7, "EDS-2": -1},
            "col_scores": {"SP3-1": 3},
        }))

        self.assertEqual(result["row_scores"], {"EDS-1": 3, "EDS-2": 0})
        self.assertEqual(result["alignment"]["EDS-1|SP3-1"], 3)
        self.assertEqual(result["alignment"]["EDS-2|SP3-1"], 0)
        self.assertIn("clamped out-of-range scores for EDS-1, EDS-2", output)

    def test_omitted_row_defaults_to_zero(self):
        from src.taxonomy import ROW_TAXONOMY, COLUMN_TAXONOMY

        row_scores = {r: 3 for r in ROW_TAXONOMY.ids() if r != "EDS-6"}
        col_scores = dict.fromkeys(COLUMN_TAXONOMY.ids(), 2)

        result, output = self.run_pipeline(json.dumps({"row_scores": row_scores, "col_scores": col_scores}))

        for c in COLUMN_TAXONOMY.ids():
            self.assertEqual(result["alignment"][f"EDS-6|{c}"], 0)
            self.assertEqual(result["alignment"][f"EDS-1|{c}"], 2)
        self.assertIn("omitted 1 objective(s), scored as 0: EDS-6", output)

    def test_missing_and_null_keys_default(self):
        result, _ = self.run_pipeline(json.dumps({"row_scores": None, "analysis": None}))

        self.assertEqual(result["row_scores"], {})
        self.assertEqual(result["col_scores"], {})
        self.assertEqual(result["top_cells"], [])
        self.assertEqual(result["analysis"], "")
        self.assertEqual(set(result["alignment"].values()), {0})
        self.assertEqual(len(result["alignment"]), 153)

    def test_whole_number_confidence_is_accepted(self):
        """JSON 1 is a valid confidence"""
        result, _ = self.run_pipeline(json.dumps({
            "row_scores": {"EDS-1": 2},
            "top_cells": [{"row": "EDS-1", "col": "SP3-1", "why": "Certain.", "confidence": 1}],
        }))

        self.assertEqual(result["top_cells"][0]["confidence"], 1.0)

    def test_unknown_ids_do_not_enter_matrix(self):
        result, output = self.run_pipeline(json.dumps({
            "row_scores": {"EDS-1": 2, "EDS-42": 3},
            "col_scores": {"SP3-1": 2, "SP9-9": 3},
        }))

        self.assertEqual(len(result["alignment"]), 153)
        self.assertFalse(any("EDS-42" in key or "SP9-9" in key for key in result["alignment"]))
        self.assertIn("ignoring unknown objective id(s) in matrix: EDS-42, SP9-9", output)

    def test_taxonomy_rejects_duplicates_and_split_groups(self):
        from src.taxonomy import Taxonomy
        from src.models import RowObjective

        a = RowObjective(id="EDS-1", group="A", title="a", compact="a")
        b = RowObjective(id="EDS-2", group="B", title="b", compact="b")
        a2 = RowObjective(id="EDS-3", group="A", title="a2", compact="a2")

        with self.assertRaises(ValueError):
            Taxonomy("dupes", [a, a])
        with self.assertRaises(ValueError):
            Taxonomy("split", [a, b, a2])

    def test_objective_id_format_enforced(self):
        from pydantic import ValidationError
        from src.models import RowObjective, ColumnObjective

        with self.assertRaises(ValidationError):
            RowObjective(id="SP1-1", group="A", title="t", compact="c")
        with self.assertRaises(ValidationError):
            ColumnObjective(id="EDS-1", priority="P", number=1, title="t", compact="c")


class TestCommandLine(TempDirTestCase):
    """Test CLI exit paths"""

    def test_upstream_failures_exit_with_distinct_messages(self):
        from src.errors import OracleTransportError, OracleOutputError

        cases = [
            (OracleTransportError("timeout"), "Scoring service unavailable"),
            (OracleOutputError("Invalid JSON from model"), "Invalid output from scoring model"),
        ]

        for error, message in cases:
            with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key"}):
                with patch('sys.argv', ['main.py', '--text', 'Valid document']):
                    with patch('main.analyze_document', side_effect=error):
                        with patch('sys.stdout', new=StringIO()) as output:
                            with self.assertRaises(SystemExit) as cm:
                                from main import main
                                main()

            self.assertEqual(cm.exception.code, 1)
            self.assertIn(message, output.getvalue())

    def test_successful_run_saves_result(self):
        from nodes.combine import build_alignment_matrix
        from src.taxonomy import ROW_TAXONOMY, COLUMN_TAXONOMY

        result = {
            "row_scores": {"EDS-5": 3},
            "col_scores": {"SP5-1": 3},
            "top_cells": [{"row": "EDS-5", "col": "SP5-1", "why": "Direct match.", "confidence": 0.9}],
            "analysis": "Business retention summary.",
            "alignment": build_alignment_matrix(
                ROW_TAXONOMY.ids(), COLUMN_TAXONOMY.ids(), {"EDS-5": 3}, {"SP5-1": 3}
            ),
        }

        with open("doc.txt", "w") as f:
            f.write("Business retention and expansion report")

        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "test-key"}):
            with patch('sys.argv', ['main.py', 'doc.txt', '--output', 'out.json']):
                with patch('main.analyze_document', return_value=result) as mock_analyze:
                    with patch('sys.stdout', new=StringIO()) as output:
                        from main import main
                        main()

        mock_analyze.assert_called_once_with("Business retention and expansion report")
        with open("out.json") as f:
            self.assertEqual(json.load(f), result)
        self.assertIn("Business retention summary.", output.getvalue())
        self.assertIn("EDS-5 × SP5-1 → 3", output.getvalue())


class TestAPIKey(TempDirTestCase):
    """Test API key validation"""

    def test_api_key_required(self):
        """Test missing API key causes early exit with clear error"""
        original_env = os.environ.copy()
        os.environ.pop("ANTHROPIC_API_KEY", None)

        with open("doc.txt", "w") as f:
            f.write("Cycling network expansion plan")

        try:
            with patch('dotenv.load_dotenv'):
                with patch('sys.argv', ['main.py', 'doc.txt']):
                    with patch('sys.stdout', new=StringIO()) as output:
                        if 'main' in sys.modules:
                            del sys.modules['main']

                        with self.assertRaises(SystemExit) as cm:
                            from main import main
                            main()

                        self.assertEqual(cm.exception.code, 1)
                        output_text = output.getvalue()
                        self.assertIn("ANTHROPIC_API_KEY", output_text)
                        self.assertIn("not set", output_text)
        finally:
            os.environ.clear()
            os.environ.update(original_env)

    def test_bad_input_reported_before_missing_key(self):
        """Whitespace-only text exits with the input error code even without a key"""
        with patch.dict(os.environ, {}, clear=True):
            with patch('sys.argv', ['main.py', '--text', '  \n ']):
                with patch('sys.stdout', new=StringIO()) as output:
                    with self.assertRaises(SystemExit) as cm:
                        from main import main
                        main()

        self.assertEqual(cm.exception.code, 2)
        self.assertIn("empty input", output.getvalue())
        self.assertNotIn("ANTHROPIC_API_KEY", output.getvalue())


class TestSavedResultViewer(TempDirTestCase):
    """Test analyze.py against damaged or hand-edited result files"""

    def write_result(self, result):
        with open("result.json", "w") as f:
            json.dump(result, f)

    def test_hand_edited_matrix_is_rebuilt(self):
        """A partial or edited alignment map is replaced by the one derived from scores"""
        from analyze import analyze_result

        self.write_result({
            "row_scores": {"EDS-5": 3},
            "col_scores": {"SP5-1": 2},
            "alignment": {"EDS-5|SP5-1": "three", "EDS-1|SP1-1": 3},
        })

        with patch('sys.stdout', new=StringIO()) as output:
            analyze_result("result.json", show_numbers=True)

        text = output.getvalue()
        self.assertIn("Aligned cells: 1/153", text)
        self.assertNotIn("three", text)

    def test_invalid_top_cell_reports_error(self):
        from analyze import analyze_result

        self.write_result({
            "row_scores": {"EDS-5": 3},
            "col_scores": {"SP5-1": 2},
            "top_cells": [{"row": "EDS-5", "why": "Missing column."}],
        })

        with patch('sys.stdout', new=StringIO()) as output:
            analyze_result("result.json")

        self.assertIn("Error: result.json has invalid scores or highlighted cells", output.getvalue())
        self.assertNotIn("MATRIX", output.getvalue())

    def test_invalid_score_reports_error(self):
        from analyze import analyze_result

        self.write_result({"row_scores": {"EDS-5": "high"}, "col_scores": {}})

        with patch('sys.stdout', new=StringIO()) as output:
            analyze_result("result.json")

        self.assertIn("Error: result.json has invalid scores", output.getvalue())


if __name__ == "__main__":
    unittest.main()
