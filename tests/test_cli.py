"""Tests for the command line driver."""

from lamport_forge.__main__ import build_parser, main
from lamport_forge.core.blocks import PublicKey, Signature, message_from_string
from lamport_forge.core.signing import verify


def keygen(tmp_path):
    prefix = tmp_path / "k"
    assert main(["keygen", "--out", str(prefix)]) == 0
    return tmp_path / "k.key", tmp_path / "k.pub"


class TestParser:
    def test_forge_repeatable_sig(self):
        args = build_parser().parse_args(
            ["forge", "--pub", "p", "--sig", "a", "--sig", "b", "--workers", "3"]
        )
        assert args.sig == ["a", "b"]
        assert args.workers == 3
        assert args.max_attempts is None
        assert args.threads is False

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out


class TestCommands:
    def test_keygen_writes_files(self, tmp_path):
        key_path, pub_path = keygen(tmp_path)
        assert len(key_path.read_text().strip()) == 256 * 2 * 64
        PublicKey.from_hex(pub_path.read_text())

    def test_sign_and_verify(self, tmp_path, capsys):
        key_path, pub_path = keygen(tmp_path)
        sig_path = tmp_path / "hello.sig"
        assert main(["sign", "--key", str(key_path), "--message", "hello",
                     "--out", str(sig_path)]) == 0
        assert main(["verify", "--pub", str(pub_path), "--message", "hello",
                     "--sig", str(sig_path)]) == 0
        assert "Verify worked? True" in capsys.readouterr().out

    def test_verify_wrong_message(self, tmp_path):
        key_path, pub_path = keygen(tmp_path)
        sig_path = tmp_path / "hello.sig"
        main(["sign", "--key", str(key_path), "--message", "hello", "--out", str(sig_path)])
        assert main(["verify", "--pub", str(pub_path), "--message", "bye",
                     "--sig", str(sig_path)]) == 1

    def test_forge(self, tmp_path, capsys):
        key_path, pub_path = keygen(tmp_path)
        argv = ["forge", "--pub", str(pub_path), "--workers", "2",
                "--max-attempts", "2000000", "--out", str(tmp_path / "forged.sig")]
        for i in range(1, 9):
            sig_path = tmp_path / f"{i}.sig"
            main(["sign", "--key", str(key_path), "--message", str(i), "--out", str(sig_path)])
            argv += ["--sig", str(sig_path), "--message", str(i)]
        assert main(argv) == 0

        out = capsys.readouterr().out
        assert "ok 8: True" in out
        assert "Difficulty: 2^" in out
        candidate = next(
            line.split(":", 1)[1].strip()
            for line in out.splitlines() if "Forged message:" in line
        )
        forged = Signature.from_hex((tmp_path / "forged.sig").read_text())
        public_key = PublicKey.from_hex(pub_path.read_text())
        assert verify(message_from_string(candidate), public_key, forged)

    def test_forge_bad_signature_file(self, tmp_path, capsys):
        _, pub_path = keygen(tmp_path)
        bad = tmp_path / "bad.sig"
        bad.write_text("abcd")
        assert main(["forge", "--pub", str(pub_path), "--sig", str(bad)]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_forge_message_count_mismatch(self, tmp_path, capsys):
        key_path, pub_path = keygen(tmp_path)
        argv = ["forge", "--pub", str(pub_path), "--max-attempts", "10"]
        for i in (1, 2):
            sig_path = tmp_path / f"{i}.sig"
            main(["sign", "--key", str(key_path), "--message", str(i), "--out", str(sig_path)])
            argv += ["--sig", str(sig_path)]
        argv += ["--message", "1", "--message", "2", "--message", "3"]
        assert main(argv) == 1
        assert "3 --message values for 2 --sig files" in capsys.readouterr().err

    def test_forge_key_mismatch(self, tmp_path, capsys):
        key_path, _ = keygen(tmp_path)
        other = tmp_path / "other"
        main(["keygen", "--out", str(other)])
        sig_path = tmp_path / "1.sig"
        main(["sign", "--key", str(key_path), "--message", "1", "--out", str(sig_path)])
        assert main(["forge", "--pub", str(tmp_path / "other.pub"), "--sig", str(sig_path)]) == 1
        assert "matches neither" in capsys.readouterr().err

    def test_demo(self, capsys):
        assert main(["demo", "--count", "8", "--workers", "2",
                     "--max-attempts", "2000000", "--timeout", "120"]) == 0
        out = capsys.readouterr().out
        assert "FORGERY" in out
        assert "Verifies:            True" in out

    def test_demo_budget_exhausted(self, capsys):
        assert main(["demo", "--count", "1", "--workers", "1", "--max-attempts", "500"]) == 1
        assert "aborted (budget)" in capsys.readouterr().err
