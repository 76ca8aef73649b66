from __future__ import annotations

import http.server
import os
import subprocess
import sys
import tempfile
import threading
import unittest
from pathlib import Path

from catch.reader import read_entry, iter_entries
from catch.variants import Variant
from catch.writer import append_entry


PAGE = b"<html><body>hello \x00\xff</body></html>\n" * 3


class _PageHandler(http.server.BaseHTTPRequestHandler):
    def do_GET(self):
        if self.path != "/page":
            self.send_error(404)
            return
        self.send_response(200)
        self.send_header("Content-Length", str(len(PAGE)))
        self.end_headers()
        self.wfile.write(PAGE)

    def log_message(self, format, *args):
        pass


class CLIIntegrationTests(unittest.TestCase):
    def run_cli(self, args, *, expect: int | None = 0, cwd: Path | None = None):
        cmd = [sys.executable, "-m", "catch.cli"] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parent
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        env["NO_PROXY"] = "127.0.0.1,localhost"
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
        )
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
            )
        return proc

    def start_server(self) -> str:
        server = http.server.HTTPServer(("127.0.0.1", 0), _PageHandler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        self.addCleanup(thread.join)
        self.addCleanup(server.server_close)
        self.addCleanup(server.shutdown)
        host, port = server.server_address
        return f"http://{host}:{port}"

    def test_no_arguments_prints_usage(self):
        proc = self.run_cli([])
        self.assertIn("usage:", proc.stdout)

    def test_get_store_and_load(self):
        base = self.start_server()
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for store_name, variant in (("web.dlb", Variant.STANDARD), ("web.dqb", Variant.QUANTUM)):
                with self.subTest(store=store_name):
                    store = root / store_name
                    self.run_cli(["get", f"{base}/page", "-o", "page.html", "--store", str(store)], cwd=root)
                    self.assertEqual((root / "page.html").read_bytes(), PAGE)
                    entries = list(iter_entries(store))
                    self.assertEqual([(e.name, e.variant) for e in entries], [("page.html", variant)])

                    out = root / f"restored-{store_name}.html"
                    proc = self.run_cli(["load", str(store), "page.html", "-o", str(out)])
                    self.assertIn("Extracted page.html", proc.stdout)
                    self.assertEqual(out.read_bytes(), PAGE)

    def test_get_http_error(self):
        base = self.start_server()
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            store = root / "web.dlb"
            proc = self.run_cli(["get", f"{base}/missing", "-o", "x.html", "--store", str(store)], cwd=root, expect=2)
            self.assertIn("404", proc.stderr)
            self.assertFalse(store.exists())

    def test_load_first_match_and_not_found(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            store = root / "s.dlb"
            append_entry(store, "dup", b"one")
            append_entry(store, "dup", b"two", Variant.QUANTUM)

            out = root / "dup.bin"
            self.run_cli(["load", str(store), "dup", "-o", str(out)])
            self.assertEqual(out.read_bytes(), b"one")

            missing = root / "missing.bin"
            proc = self.run_cli(["load", str(store), "DUP", "-o", str(missing)], expect=1)
            self.assertIn("not found", proc.stderr)
            self.assertFalse(missing.exists())

            proc = self.run_cli(["load", str(root / "absent.dlb"), "dup", "-o", str(missing)], expect=2)
            self.assertIn("Error:", proc.stderr)

    def test_list(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = Path(tmp) / "s.dqb"
            append_entry(store, "a:b", b"xyz", Variant.QUANTUM)
            append_entry(store, "plain", b"", Variant.STANDARD)
            proc = self.run_cli(["list", str(store)])
            self.assertEqual(proc.stdout.splitlines(), ["quantum\t3\ta:b", "standard\t0\tplain"])
            self.assertEqual(read_entry(store, "a:b"), b"xyz")

    def test_ping_rejects_hostnames(self):
        proc = self.run_cli(["ping", "not-an-ip", "-c", "1"], expect=2)
        self.assertIn("Invalid IPv4 address", proc.stderr)


class CorruptScriptTests(unittest.TestCase):
    def run_corrupt(self, args):
        repo_root = Path(__file__).resolve().parent
        env = os.environ.copy()
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        proc = subprocess.run(
            [sys.executable, str(repo_root / "scripts" / "corrupt.py")] + list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
        )
        self.assertEqual(proc.returncode, 0, proc.stderr)
        return proc

    def test_redundant_lines_do_not_matter(self):
        payload = bytes(range(40))
        with tempfile.TemporaryDirectory() as tmp:
            store = Path(tmp) / "q.dqb"
            append_entry(store, "other", b"zz", Variant.QUANTUM)
            append_entry(store, "q", payload, Variant.QUANTUM)
            self.run_corrupt(["truncate", str(store), "--field", "dec", "--entry", "1", "--keep", "3"])
            self.run_corrupt(["truncate", str(store), "--field", "oct", "--entry", "1"])
            self.assertEqual(read_entry(store, "q"), payload)
            self.assertEqual(read_entry(store, "other"), b"zz")

            self.run_corrupt(["truncate", str(store), "--field", "hex", "--entry", "1", "--keep", "5"])
            self.assertEqual(read_entry(store, "q"), payload[:5])

    def test_injected_token_is_skipped(self):
        payload = b"0123456789abcdefXYZ"
        with tempfile.TemporaryDirectory() as tmp:
            store = Path(tmp) / "s.dlb"
            append_entry(store, "s", payload)
            self.run_corrupt(["inject", str(store), "--field", "data", "--token", "ZZ", "--position", "4"])
            self.assertEqual(read_entry(store, "s"), payload)
            # a valid hex token adds a byte instead
            self.run_corrupt(["inject", str(store), "--field", "data", "--token", "7E", "--position", "0"])
            self.assertEqual(read_entry(store, "s"), b"~" + payload)


if __name__ == "__main__":
    unittest.main()
