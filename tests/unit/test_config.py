import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from credproc.config import Config, DEFAULT_SESSION_NAME, CACHE_FILENAME
from credproc.enums.log_level import LogLevel
from credproc.exceptions.config_exceptions import ConfigValueException, ConfigTypeException


class ConfigTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.token_path = os.path.join(self._tmp.name, "token")
        with open(self.token_path, "w") as f:
            f.write("eyJhbGciOiJSUzI1NiJ9.payload.sig\n")

        self.env = {
            "AWS_ROLE_ARN": "arn:aws:iam::123456789012:role/workload",
            "AWS_DEFAULT_REGION": "eu-north-1",
            "AWS_WEB_IDENTITY_TOKEN_FILE": self.token_path,
            "AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_CACHE_FILE": os.path.join(
                self._tmp.name, "cache.json"
            ),
        }

    def tearDown(self):
        self._tmp.cleanup()

    def test_config_load_success(self):
        config = Config(environ=self.env)

        assert config.role_arn == "arn:aws:iam::123456789012:role/workload"
        assert config.region == "eu-north-1"
        assert config.token_filepath == self.token_path
        assert config.session_name == DEFAULT_SESSION_NAME
        assert config.duration_seconds == 3600
        assert config.provider_id is None
        assert config.log_level == LogLevel.WARNING

    def test_token_is_read_verbatim(self):
        with open(self.token_path, "wb") as f:
            f.write(b"eyJhbGciOiJSUzI1NiJ9.pay\r\nload.sig\n")

        config = Config(environ=self.env)

        assert config.web_identity_token == "eyJhbGciOiJSUzI1NiJ9.pay\r\nload.sig\n"

    def test_undecodable_token_file(self):
        with open(self.token_path, "wb") as f:
            f.write(b"\xff\xfe\x00token")

        with self.assertRaises(ConfigTypeException) as ctx:
            Config(environ=self.env)

        assert "AWS_WEB_IDENTITY_TOKEN_FILE" in str(ctx.exception)

    def test_optional_values(self):
        self.env.update(
            {
                "AWS_WEB_IDENTITY_SESSION_NAME": "ci-runner",
                "AWS_WEB_IDENTITY_DURATION": "900",
                "AWS_WEB_IDENTITY_PROVIDER_ID": "www.amazon.com",
                "AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_LOG_LEVEL": "debug",
            }
        )
        config = Config(environ=self.env)

        assert config.session_name == "ci-runner"
        assert config.duration_seconds == 900
        assert config.provider_id == "www.amazon.com"
        assert config.log_level == LogLevel.DEBUG

    def test_missing_required_field(self):
        for key in ("AWS_ROLE_ARN", "AWS_DEFAULT_REGION", "AWS_WEB_IDENTITY_TOKEN_FILE"):
            env = dict(self.env)
            del env[key]
            with self.assertRaises(ConfigValueException) as ctx:
                Config(environ=env)

            assert key in str(ctx.exception)

    def test_token_file_does_not_exist(self):
        self.env["AWS_WEB_IDENTITY_TOKEN_FILE"] = os.path.join(self._tmp.name, "missing")

        with self.assertRaises(ConfigTypeException) as ctx:
            Config(environ=self.env)

        assert "must point to an existing file" in str(ctx.exception)

    def test_token_path_is_directory(self):
        self.env["AWS_WEB_IDENTITY_TOKEN_FILE"] = self._tmp.name

        self.assertRaises(ConfigTypeException, lambda: Config(environ=self.env))

    def test_valid_durations_are_used(self):
        for raw, expected in (("1", 1), ("43200", 43200), ("+900", 900), ("2147483647", 2147483647)):
            self.env["AWS_WEB_IDENTITY_DURATION"] = raw
            self.assertEqual(Config(environ=self.env).duration_seconds, expected)

    def test_invalid_durations_fall_back_to_default(self):
        for raw in (
            "", "abc", "1h", "0", "-5", "3.5", " 900", "1_000", "2147483648",
            "9" * 5000,
            "+" + "0" * 11 + "900",
        ):
            self.env["AWS_WEB_IDENTITY_DURATION"] = raw
            self.assertEqual(Config(environ=self.env).duration_seconds, 3600)

    def test_log_level_aliases(self):
        for raw, expected in (
            ("warn", LogLevel.WARNING),
            ("INFO", LogLevel.INFO),
            ("fatal", LogLevel.CRITICAL),
            ("panic", LogLevel.CRITICAL),
            ("trace", LogLevel.TRACE),
        ):
            self.env["AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_LOG_LEVEL"] = raw
            self.assertEqual(Config(environ=self.env).log_level, expected)

    def test_invalid_log_level_keeps_default(self):
        self.env["AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_LOG_LEVEL"] = "chatty"

        assert Config(environ=self.env).log_level == LogLevel.WARNING

    def test_default_cache_path_under_home(self):
        del self.env["AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_CACHE_FILE"]

        with patch("credproc.config.Path.home", return_value=Path(self._home())):
            config = Config(environ=self.env)

        assert config.cache_filepath == os.path.join(self._home(), ".aws", CACHE_FILENAME)

    def test_unresolvable_home_without_override(self):
        del self.env["AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_CACHE_FILE"]

        with patch(
            "credproc.config.Path.home",
            side_effect=RuntimeError("Could not determine home directory."),
        ):
            with self.assertRaises(ConfigValueException) as ctx:
                Config(environ=self.env)

        assert "AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_CACHE_FILE" in str(ctx.exception)

    def test_dotenv_file_layered_under_environment(self):
        env_file = os.path.join(self._tmp.name, ".config.env")
        with open(env_file, "w") as f:
            f.write("AWS_DEFAULT_REGION=us-east-1\n")
            f.write("AWS_WEB_IDENTITY_SESSION_NAME=from-file\n")
        env = dict(self.env)
        del env["AWS_DEFAULT_REGION"]

        config = Config(env_file, environ=env)

        assert config.region == "us-east-1"
        assert config.session_name == "from-file"

    def test_log_level_applied_before_other_settings(self):
        self.env["AWS_WEB_IDENTITY_CREDENTIAL_PROCESS_LOG_LEVEL"] = "info"
        self.env["AWS_WEB_IDENTITY_DURATION"] = "abc"
        events = []

        with patch("credproc.config.logger") as mock_logger:
            mock_logger.info.side_effect = lambda message: events.append(("info", message))
            Config(
                environ=self.env,
                on_log_level=lambda level: events.append(("level", level)),
            )

        assert events[0] == ("level", LogLevel.INFO)
        assert events[1] == ("info", "Falling back to default duration 3600")

    @patch.dict("os.environ", {"AWS_DEFAULT_REGION": "eu-north-1"}, clear=True)
    def test_reads_process_environment_by_default(self):
        with self.assertRaises(ConfigValueException) as ctx:
            Config()

        assert "AWS_ROLE_ARN" in str(ctx.exception)

    def _home(self) -> str:
        return os.path.join(self._tmp.name, "home")


if __name__ == "__main__":
    unittest.main()
