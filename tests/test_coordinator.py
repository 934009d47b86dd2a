"""
扫描协调器测试
"""
import os
import shutil
import sys

import pytest

from scanner.file_scanner import DirectoryScanner
from watcher import (
    ScanCoordinator, ScanRequest, ScanState, ScanThread, CollectingListener
)


class TestStoreUpdates:

    def test_add_only_existing_directories(self, coordinator, make_tree, tmp_path):
        root = make_tree("music", [])
        a_file = tmp_path / "song.mp3"
        a_file.write_text("x", encoding="utf-8")

        coordinator.process(
            add_paths=[str(root), str(a_file), str(tmp_path / "missing"), None, ""]
        )

        assert coordinator.store.all_paths() == [str(root)]

    def test_adding_a_regular_file_leaves_store_unchanged(self, coordinator, tmp_path):
        a_file = tmp_path / "notes.txt"
        a_file.write_text("x", encoding="utf-8")

        assert coordinator.process(add_paths=[str(a_file)], should_scan=True) == []
        assert coordinator.store.all_paths() == []

    def test_duplicate_adds_are_unique(self, coordinator, make_tree):
        root = str(make_tree("music", []))
        coordinator.process(add_paths=[root, root])
        coordinator.process(add_paths=[root])
        assert coordinator.store.all_paths() == [root]

    def test_remove_runs_before_add(self, coordinator, make_tree):
        root = str(make_tree("music", []))
        coordinator.process(add_paths=[root], remove_paths=[root])
        assert coordinator.store.all_paths() == [root]

    def test_remove(self, coordinator, make_tree):
        one = str(make_tree("one", []))
        two = str(make_tree("two", []))
        coordinator.process(add_paths=[one, two])
        coordinator.process(remove_paths=[one, None])
        assert coordinator.store.all_paths() == [two]


class TestPruning:

    def test_deleted_directory_is_pruned_without_scan(self, coordinator, make_tree):
        a = make_tree("A", ["a.txt"])
        b = make_tree("B", ["b.txt"])
        coordinator.process(add_paths=[str(a), str(b)])

        shutil.rmtree(b)
        assert coordinator.process(should_scan=False) is None
        assert coordinator.store.all_paths() == [str(a)]

    def test_pruned_directory_is_never_scanned(self, store, make_tree):
        a = make_tree("A", ["a.txt"])
        b = make_tree("B", ["b.txt"])
        store.insert(str(a))
        store.insert(str(b))
        shutil.rmtree(b)

        visited = []

        class RecordingScanner(DirectoryScanner):
            def scan(self, root_dir, extensions=None):
                visited.append(root_dir)
                return super().scan(root_dir, extensions)

        coordinator = ScanCoordinator(store, RecordingScanner())
        result = coordinator.process(extensions=[".txt"], should_scan=True)

        assert visited == [str(a)]
        assert result == [str(a / "a.txt")]


class TestScanning:

    def test_filter_across_roots(self, coordinator, make_tree):
        docs = make_tree("docs", ["a.txt", "b.md", "c.png", "sub/d.txt"])
        more = make_tree("more", ["e.md"])

        result = coordinator.process(
            add_paths=[str(docs), str(more)], extensions=[".txt", ".md"], should_scan=True
        )

        assert set(result) == {
            str(docs / "a.txt"), str(docs / "b.md"),
            str(docs / "sub" / "d.txt"), str(more / "e.md"),
        }

    def test_overlapping_roots_are_deduplicated(self, coordinator, make_tree):
        root = make_tree("root", ["a.txt", "nested/b.txt", "nested/c.txt"])
        nested = root / "nested"

        result = coordinator.process(
            add_paths=[str(root), str(nested)], extensions=[".txt"], should_scan=True
        )

        assert len(result) == len(set(result)) == 3
        assert set(result) == {
            str(root / "a.txt"), str(nested / "b.txt"), str(nested / "c.txt")
        }

    def test_first_seen_order_is_kept(self, store, make_tree):
        root = str(make_tree("root", ["a.txt"]))

        class RepeatingScanner(DirectoryScanner):
            def scan_all(self, roots, extensions=None):
                return ["/z", "/y", "/z", "/x", "/y"]

        coordinator = ScanCoordinator(store, RepeatingScanner())
        coordinator.process(add_paths=[root])
        assert coordinator.process(should_scan=True) == ["/z", "/y", "/x"]

    def test_empty_store_yields_empty_result(self, coordinator):
        received = []
        coordinator.search_complete.connect(received.append)

        assert coordinator.process(extensions=[".txt"], should_scan=True) == []
        assert received == [[]]

    def test_no_event_without_scan(self, coordinator, make_tree):
        received = []
        listener = CollectingListener()
        coordinator.search_complete.connect(received.append)
        coordinator.add_listener(listener)

        coordinator.process(add_paths=[str(make_tree("root", ["a.txt"]))])

        assert received == []
        assert listener.results == []


class TestDelivery:

    def test_signal_and_listeners_receive_same_paths(self, coordinator, make_tree):
        root = make_tree("root", ["a.txt"])
        received = []
        first, second = CollectingListener(), CollectingListener()
        coordinator.search_complete.connect(received.append)
        coordinator.add_listener(first)
        coordinator.add_listener(second)
        coordinator.add_listener(first)

        result = coordinator.process(
            add_paths=[str(root)], extensions=[".txt"], should_scan=True
        )

        assert received == [result]
        assert first.results == [result]
        assert second.last == result

    def test_failing_listener_does_not_block_others(self, coordinator, make_tree):
        class Broken:
            def notify(self, matched_paths):
                raise RuntimeError("boom")

        good = CollectingListener()
        coordinator.add_listener(Broken())
        coordinator.add_listener(good)

        result = coordinator.process(
            add_paths=[str(make_tree("root", ["a.txt"]))], should_scan=True
        )

        assert good.last == result

    def test_removed_listener_is_not_notified(self, coordinator):
        listener = CollectingListener()
        coordinator.add_listener(listener)
        coordinator.remove_listener(listener)
        coordinator.process(should_scan=True)
        assert listener.results == []

    def test_state_sequence(self, coordinator):
        states = []
        coordinator.state_changed.connect(states.append)

        coordinator.process(should_scan=True)
        assert states == ["updating", "verifying", "scanning", "delivering", "idle"]

        states.clear()
        coordinator.process(should_scan=False)
        assert states == ["updating", "verifying", "idle"]
        assert coordinator.state is ScanState.IDLE

    def test_overlapping_requests_report_every_stage(self, coordinator):
        states = []
        coordinator.state_changed.connect(states.append)

        class Reentrant:
            def notify(self, matched_paths):
                # 在外层请求分发结果时插入另一个请求
                coordinator.process(should_scan=False)

        coordinator.add_listener(Reentrant())
        coordinator.process(should_scan=True)

        assert states == [
            "updating", "verifying", "scanning", "delivering",
            "updating", "verifying", "idle",
            "idle",
        ]


@pytest.mark.skipif(sys.platform != "linux", reason="需要允许任意字节文件名的文件系统")
class TestUndecodableNames:
    """目录名不是合法 UTF-8 时不向调用方抛出异常"""

    def _bad_dir(self, tmp_path):
        bad = os.path.join(os.fsencode(tmp_path), b"bad\xff")
        os.mkdir(bad)
        with open(os.path.join(bad, b"a.txt"), "w", encoding="utf-8") as f:
            f.write("a")
        path = os.fsdecode(bad)
        assert os.path.isdir(path)
        return path

    def test_adding_undecodable_directory_is_absorbed(self, coordinator, tmp_path):
        path = self._bad_dir(tmp_path)

        result = coordinator.process(add_paths=[path], extensions=[".txt"], should_scan=True)

        assert result == []
        assert coordinator.store.all_paths() == []

    def test_undecodable_file_names_appear_in_results(self, coordinator, tmp_path):
        self._bad_dir(tmp_path)

        result = coordinator.process(
            add_paths=[str(tmp_path)], extensions=[".txt"], should_scan=True
        )

        assert os.path.join(str(tmp_path), os.fsdecode(b"bad\xff"), "a.txt") in result


class TestScanRequest:

    def test_from_dict_accepts_both_key_styles(self):
        camel = ScanRequest.from_dict({
            "addPaths": ["/a"], "removePaths": ["/b"],
            "extensionFilter": [".txt"], "shouldScan": True,
        })
        snake = ScanRequest.from_dict({
            "add_paths": ["/a"], "remove_paths": ["/b"],
            "extensions": [".txt"], "scan": True,
        })
        assert camel == snake == ScanRequest(["/a"], ["/b"], [".txt"], True)

    def test_from_dict_defaults(self):
        assert ScanRequest.from_dict({}) == ScanRequest()
        assert ScanRequest.from_dict({"extensionFilter": []}).extensions == []

    def test_convenience_constructors(self):
        assert ScanRequest.scan_only([".mp3"]) == ScanRequest(extensions=[".mp3"], scan=True)
        assert ScanRequest.add("/a").add_paths == ["/a"]
        assert ScanRequest.add(["/a"]).scan is True
        assert ScanRequest.remove(["/a"]).scan is False

    def test_handle(self, coordinator, make_tree):
        root = make_tree("root", ["a.txt", "b.md"])
        result = coordinator.handle(ScanRequest.add([str(root)], [".md"]))
        assert result == [str(root / "b.md")]


class TestScanThread:

    def test_runs_request_in_background(self, coordinator, make_tree):
        root = make_tree("root", ["a.txt"])
        thread = ScanThread(coordinator, ScanRequest.add([str(root)], [".txt"]))
        thread.start()
        assert thread.wait(10000)
        assert thread.result == [str(root / "a.txt")]

    def test_no_result_without_scan(self, coordinator, make_tree):
        root = make_tree("root", ["a.txt"])
        thread = ScanThread(coordinator, ScanRequest.add([str(root)], scan=False))
        thread.start()
        assert thread.wait(10000)
        assert thread.result is None
        assert coordinator.store.all_paths() == [str(root)]
