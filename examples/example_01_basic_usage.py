"""Example 01: Basic document store usage.

This example walks through the store lifecycle:
- opening a store and writing a document with index slots
- overwriting it with a higher revision
- handling a revision conflict by retrying on top of the winning row
- counting, reading and deleting with predicates
"""

from docstore import DocumentConflictError, DocumentRecord, QueryParams, Store, encode, where


def save_with_retry(store: Store, doc: DocumentRecord) -> DocumentRecord:
    """Write ``doc``, bumping its revision past the stored one on conflict."""
    try:
        store.put([doc])
        return doc
    except DocumentConflictError as e:
        print(f"  conflict: stored rev is {e.record.rev}, retrying")
        retry = doc.copy()
        retry.rev = e.record.rev + 1
        store.put([retry])
        return retry


def main():
    """Run basic usage example."""
    with Store("example", "tmp") as store:
        print("1. Insert data1 at rev 1")
        doc = DocumentRecord("data1", 1, encode({"n": 1, "f": 2.3, "s": "hello"}))
        doc.set_string_index(0, "h").set_int_index(0, 1)
        store.put([doc])

        print("2. Update data1 to rev 2")
        doc.rev = 2
        doc.data = encode({"n": 2, "f": 3.4, "s": "world"})
        doc.set_string_index(0, "w")
        store.put([doc])

        print("3. Write a stale revision")
        doc = save_with_retry(store, doc)
        print(f"  saved at rev {doc.rev}")

        count = store.get([QueryParams().where(where.equal("pk", "data1")).count()])[0][0]
        print(f"4. Documents with pk=data1: {count.count}")

        (items,) = store.get([QueryParams().where(where.equal("si0", "w")).order_by("pk")])
        for item in items:
            print(f"5. {item.pk} rev={item.rev} data={item.decode()}")

        print(f"6. Deleted {store.delete()} document(s)")


if __name__ == "__main__":
    main()
