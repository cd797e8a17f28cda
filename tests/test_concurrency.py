"""Concurrent mutations against one store, each call on its own session."""
import os
import threading
from concurrent.futures import ThreadPoolExecutor

import models
import shares
from auth import ShareSession
from database import SessionLocal
from errors import ShareVaultError
from file_service import IncomingFile, delete_file, upload_files

PNG = b"\x89PNG\r\n\x1a\nfake"
OK = "ok"


def run_together(calls):
    """Start every (fn, args) at the same moment; return results in order.

    Each call gets a fresh session. Domain errors come back as their class
    name so a batch never aborts on a sibling's failure.
    """
    barrier = threading.Barrier(len(calls))

    def worker(fn, args):
        session = SessionLocal()
        try:
            barrier.wait()
            result = fn(session, *args)
            return OK if result is None else result
        except ShareVaultError as e:
            return type(e).__name__
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(worker, fn, args) for fn, args in calls]
        return [f.result(timeout=30) for f in futures]


class TestConcurrentFileDeletes:

    def test_same_id_deleted_once_sibling_unaffected(self, db, blob_store):
        share = shares.create_share(db, "Batch", "pw")
        share_id = share.id
        target, sibling = upload_files(db, blob_store, share_id, [
            IncomingFile("1.png", "image/png", PNG),
            IncomingFile("2.png", "image/png", PNG),
        ])
        target_id, sibling_id = target.id, sibling.id
        session = ShareSession(share_id=share_id)

        calls = [(delete_file, (blob_store, target_id, session)) for _ in range(6)]
        calls.append((delete_file, (blob_store, sibling_id, session)))
        results = run_together(calls)

        same_id = results[:-1]
        assert same_id.count(OK) == 1
        assert same_id.count("NotFound") == 5
        assert results[-1] == OK

        db.expire_all()
        assert db.query(models.File).count() == 0
        assert os.listdir(blob_store.upload_dir) == []
        assert db.get(models.Share, share_id) is not None


class TestConcurrentShareLifecycle:

    def test_parallel_creates_all_persist(self, db):
        calls = [(shares.create_share, (f"share-{i}", "pw")) for i in range(10)]
        created = run_together(calls)

        ids = {s.id for s in created}
        assert len(ids) == 10
        db.expire_all()
        assert db.query(models.Share).count() == 10

    def test_same_share_deleted_once(self, db, blob_store):
        share_id = shares.create_share(db, "Gone", "pw").id
        upload_files(db, blob_store, share_id, [
            IncomingFile("1.png", "image/png", PNG),
            IncomingFile("2.png", "image/png", PNG),
        ])

        results = run_together([(shares.delete_share, (blob_store, share_id)) for _ in range(4)])

        assert results.count(2) == 1
        assert results.count("NotFound") == 3
        db.expire_all()
        assert db.query(models.File).count() == 0
        assert db.get(models.Share, share_id) is None

    def test_uploads_racing_share_delete_leave_no_orphans(self, db, blob_store):
        share_id = shares.create_share(db, "Racy", "pw").id
        other_id = shares.create_share(db, "Bystander", "pw").id

        calls = [(upload_files, (blob_store, share_id, [IncomingFile(f"{i}.png", "image/png", PNG)]))
                 for i in range(4)]
        calls.append((shares.delete_share, (blob_store, share_id)))
        calls.append((upload_files, (blob_store, other_id, [IncomingFile("keep.png", "image/png", PNG)])))
        results = run_together(calls)

        for outcome in results[:4]:
            assert outcome == "NotFound" or isinstance(outcome, list)
        assert isinstance(results[4], int)

        db.expire_all()
        assert db.get(models.Share, share_id) is None
        assert db.query(models.File).filter(models.File.share_id == share_id).count() == 0
        (kept,) = db.query(models.File).all()
        assert kept.share_id == other_id
        assert os.listdir(blob_store.upload_dir) == [kept.stored_name]
