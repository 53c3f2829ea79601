import json

from git_fixtures import commit_file, init_repo

from struct_history import cli


V1 = "use std::fmt;\n\nstruct Foobar {\n    a: i32,\n}\n"
V2 = "use std::fmt;\n\nstruct Foobar {\n    a: i32,\n    b: String,\n}\n"
V3 = "use std::fmt;\nuse std::io;\n\nstruct Foobar {\n    a: i32,\n    c: String,\n}\n\nfn main() {}\n"


def _history_repo(tmp_path):
    """
    Three commits: the struct is introduced, gains a field, and then has
    that field renamed while unrelated lines are added around it. A
    commit touching only another file sits in between.
    """

    repo = init_repo(tmp_path / "repo")
    commits = [commit_file(repo, "src/model.rs", V1, "add Foobar", tick=1)]
    commits.append(commit_file(repo, "src/model.rs", V2, "add b", tick=2))
    commit_file(repo, "README.md", "docs\n", "docs", tick=3)
    commits.append(commit_file(repo, "src/model.rs", V3, "rename b to c", tick=4))
    return repo, commits


def test_cli_prints_signatures_oldest_first(tmp_path, capsys):
    repo, _ = _history_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo), "src/model.rs", "Foobar"])

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == [
        "{ a : i32 }",
        "{ a : i32 , b : String }",
        "{ a : i32 , c : String }",
    ]


def test_cli_json_report(tmp_path, capsys):
    repo, commits = _history_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo), "--json", "src/model.rs", "Foobar"])

    assert exit_code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["path"] == "src/model.rs"
    assert report["commits_visited"] == 4
    assert report["revisions_examined"] == 3
    assert [entry["commit"] for entry in report["signatures"]] == commits
    assert report["signatures"][2]["changes"] == ["~ b -> c"]


def test_cli_shows_changes(tmp_path, capsys):
    repo, commits = _history_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo), "--changes", "src/model.rs", "Foobar"])

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == f"{commits[0][:7]} {{ a : i32 }}"
    assert "    + b: String" in lines
    assert lines[-1] == "    ~ b -> c"


def test_cli_accepts_an_explicit_span(tmp_path, capsys):
    repo, _ = _history_repo(tmp_path)
    content = V3.encode()
    start = content.index(b"\nstruct")
    end = content.index(b"}\n") + 1

    exit_code = cli.main(["--repo", str(repo), "--span", f"{start}:{end}", "src/model.rs"])

    assert exit_code == 0
    assert len(capsys.readouterr().out.splitlines()) == 3


def test_cli_reports_parse_failure_with_partial_results(tmp_path, capsys):
    repo = init_repo(tmp_path / "repo")
    commit_file(repo, "model.rs", "\nstruct Foobar {\n    a: ,\n}\n", "broken", tick=1)
    commit_file(repo, "model.rs", "\nstruct Foobar {\n    a: i32,\n}\n", "fixed", tick=2)

    exit_code = cli.main(["--repo", str(repo), "model.rs", "Foobar"])

    assert exit_code == 1
    err = capsys.readouterr().err
    assert "struct-history: error:" in err
    assert "a: ," in err
    assert "{ a : i32 }" in err


def test_cli_reports_missing_entity(tmp_path, capsys):
    repo, _ = _history_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo), "src/model.rs", "Missing"])

    assert exit_code == 1
    assert "could not find 'struct Missing'" in capsys.readouterr().err


def test_cli_rejects_invalid_limit(tmp_path, capsys):
    repo, _ = _history_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo), "--max-revisions", "0", "src/model.rs", "Foobar"])

    assert exit_code == 1
    assert "max_revisions" in capsys.readouterr().err
