import threading
from types import SimpleNamespace

import pytest
from google.api_core import exceptions as gexc


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    def upload_from_filename(self, filename):
        client = self.bucket.client
        if self.name in client.fail_uploads:
            raise gexc.ServiceUnavailable("upload failed")
        with open(filename, "rb") as f:
            data = f.read()
        with client.lock:
            client.objects[(self.bucket.name, self.name)] = data
            client.events.append(("upload", self.bucket.name, self.name))

    def delete(self):
        client = self.bucket.client
        with client.lock:
            client.events.append(("delete_object", self.bucket.name, self.name))
            client.objects.pop((self.bucket.name, self.name), None)
        if client.fail_object_deletes:
            raise gexc.NotFound("object gone")


class FakeBucket:
    def __init__(self, client, name):
        self.client = client
        self.name = name

    def blob(self, name):
        return FakeBlob(self, name)

    def delete(self):
        with self.client.lock:
            self.client.events.append(("delete_bucket", self.name))
        if self.client.fail_bucket_deletes:
            raise gexc.Conflict("bucket not empty")


class FakeStorageClient:
    def __init__(self):
        self.lock = threading.Lock()
        self.events = []
        self.objects = {}
        self.fail_uploads = set()
        self.fail_create = False
        self.fail_object_deletes = False
        self.fail_bucket_deletes = False

    def create_bucket(self, name, project=None):
        if self.fail_create:
            raise gexc.Forbidden("no permission")
        with self.lock:
            self.events.append(("create_bucket", project, name))

    def bucket(self, name):
        return FakeBucket(self, name)

    def count(self, kind, *args):
        return sum(1 for e in self.events if e[0] == kind and e[1:1 + len(args)] == args)


class FakeOperation:
    def __init__(self, response=None, error=None):
        self._response = response
        self._error = error
        self.timeout = "unset"

    def result(self, timeout=None):
        self.timeout = timeout
        if self._error is not None:
            raise self._error
        return self._response


class FakeSpeechClient:
    """Returns one result per phrase; URIs listed in ``fail`` raise."""

    def __init__(self, phrases=("hello", "world")):
        self.phrases = list(phrases)
        self.fail = set()
        self.requests = []
        self.operations = []

    def long_running_recognize(self, config=None, audio=None):
        self.requests.append((config, audio))
        if audio.uri in self.fail:
            op = FakeOperation(error=gexc.InternalServerError("recognition failed"))
        else:
            results = [
                SimpleNamespace(alternatives=[SimpleNamespace(transcript=p)]) for p in self.phrases
            ]
            op = FakeOperation(response=SimpleNamespace(results=results))
        self.operations.append(op)
        return op


@pytest.fixture
def storage_client():
    return FakeStorageClient()


@pytest.fixture
def speech_client():
    return FakeSpeechClient()


@pytest.fixture
def make_wav(tmp_path):
    src = tmp_path / "in"
    src.mkdir()

    def make(name, data=b"RIFF0000WAVE"):
        path = src / name
        path.write_bytes(data)
        return str(path)

    return make


@pytest.fixture
def fake_sox(monkeypatch):
    """Replace the sox subprocess; inputs whose name contains ``bad`` fail."""
    import os
    import shutil
    import subprocess

    from transcribe import audio_processor

    calls = []

    def run(cmd, stdout=None, stderr=None, text=None):
        calls.append(cmd)
        if "bad" in os.path.basename(cmd[1]):
            return subprocess.CompletedProcess(cmd, 2, stdout="sox FAIL formats: can't open input file")
        shutil.copyfile(cmd[1], cmd[2])
        return subprocess.CompletedProcess(cmd, 0, stdout="")

    monkeypatch.setattr(audio_processor.subprocess, "run", run)
    return calls
