from scripts import dev_setup


def test_update_env_file_preserves_existing_values(tmp_path, capsys):
    env_path = tmp_path / ".env"
    env_path.write_text("# comment\nSECRET_KEY=keep-me\nREPLICATE_API_TOKEN=old\n")

    args = dev_setup.parse_args(["--token", "r8_new", "--env-path", str(env_path)])
    values = dev_setup.update_env_file(args)

    assert values["SECRET_KEY"] == "keep-me"
    assert values["REPLICATE_API_TOKEN"] == "r8_new"
    assert values["GENERATION_BACKEND"] == "replicate"
    assert dev_setup.read_env(env_path) == values
    assert (tmp_path / ".env.bak").exists()
    assert "backed up" in capsys.readouterr().out


def test_openai_backend_writes_openai_keys(tmp_path):
    env_path = tmp_path / ".env"
    args = dev_setup.parse_args(
        ["--backend", "openai", "--token", "sk-test", "--model", "gpt-4o", "--env-path", str(env_path)]
    )

    values = dev_setup.update_env_file(args)

    assert values["OPENAI_API_KEY"] == "sk-test"
    assert values["OPENAI_MODEL"] == "gpt-4o"
    assert "REPLICATE_API_TOKEN" not in values


def test_main_warns_when_credential_missing(tmp_path, capsys):
    dev_setup.main(["--env-path", str(tmp_path / ".env")])

    out = capsys.readouterr().out
    assert "REPLICATE_API_TOKEN is not set" in out


def test_update_env_file_keeps_comments_and_unrelated_lines(tmp_path):
    env_path = tmp_path / ".env"
    env_path.write_text("# local settings\nSECRET_KEY=keep-me\n")

    dev_setup.update_env_file(dev_setup.parse_args(["--rate-limit", "3 per minute", "--env-path", str(env_path)]))

    text = env_path.read_text()
    assert "# local settings" in text
    assert "SECRET_KEY=keep-me" in text
    assert "STORY_RATE_LIMIT=3 per minute" in text
