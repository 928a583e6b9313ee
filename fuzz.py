#!/usr/bin/env python3
"""
Random fuzzer for minihtml.
Generates subset-grammar documents with random corruption and checks that
parsing terminates, is deterministic and only fails with UnclosedElementError.
"""

import argparse
import random
import string
import sys
import time
import traceback

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "ul", "li",
    "form", "input", "button", "head", "body", "html", "title", "meta",
    "h1", "h2", "section", "article", "nav", "Div", "SPAN", "x1",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "name", "value", "type",
    "disabled", "checked", "hidden", "html", "charset", "lang",
]

WHITESPACE = [" ", "\t", "\n", "\r", ""]


def random_string(rng=random, min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = rng.randint(min_len, max_len)
    return "".join(rng.choices(string.ascii_letters + string.digits, k=length))


def random_whitespace(rng=random):
    return "".join(rng.choices(WHITESPACE, k=rng.randint(0, 4)))


def fuzz_tag_name(rng=random):
    strategies = [
        lambda: rng.choice(TAGS),
        lambda: rng.choice(TAGS) + random_string(rng, 1, 3),
        lambda: random_string(rng, 1, 8),
        lambda: "",  # Empty
        lambda: "-" + rng.choice(TAGS),
        lambda: rng.choice(TAGS) + "-x",
        lambda: " " + rng.choice(TAGS),
    ]
    return rng.choice(strategies)()


def fuzz_attribute(rng=random):
    name = rng.choice([
        lambda: rng.choice(ATTRIBUTES),
        lambda: random_string(rng, 1, 10),
        lambda: "",
        lambda: "data-x",
        lambda: "=",
    ])()
    value = rng.choice([
        lambda: random_string(rng, 0, 20),
        lambda: "a=b",
        lambda: "a.png",
        lambda: "x y z",
        lambda: "<b>",
        lambda: "",
    ])()
    quote_start, quote_end = rng.choice([
        ('="', '"'),
        ("='", "'"),
        ("=", ""),  # Unquoted
        (" = ", ""),  # Spaces around equals
        ("", ""),  # Flag
        ('="', ""),  # Unclosed quote
        ("='", '"'),  # Mismatched quotes
        ("==", ""),
    ])
    if not quote_start:
        value = ""
    return f"{name}{quote_start}{value}{quote_end}"


def fuzz_start(tag, rng=random):
    attrs = "".join(random_whitespace(rng) + " " + fuzz_attribute(rng) for _ in range(rng.randint(0, 3)))
    closing = rng.choice([">", ">", ">", " >", "/>", "", ">>"])
    return f"<{tag}{attrs}{random_whitespace(rng)}{closing}"


def fuzz_self_closing(rng=random):
    return fuzz_start(fuzz_tag_name(rng), rng).rstrip(">") + rng.choice(["/>", " />", "/ >"])


def fuzz_close_tag(rng=random):
    tag = fuzz_tag_name(rng)
    return rng.choice([
        f"</{tag}>",
        f"</{tag} >",
        f"</ {tag}>",
        f"</{tag}",
        f"</{tag}/>",
    ])


def fuzz_comment(rng=random):
    content = random_string(rng, 0, 30)
    return rng.choice([
        f"<!--{content}-->",
        f"<!-- {content} -->",
        f"<!---{content}--->",
        f"<!-{content}-->",
        f"<!--{content}",
        f"<!---->",
        f"<!--{content}-{content}-->",
        f"<!{'-' * 101}{content}-->",
        f"<!--{content}-- >",
    ])


def fuzz_doctype(rng=random):
    return rng.choice([
        "<!DOCTYPE html>",
        "<!DOCTYPE html >",
        "<!DOCTYPE>",
        "<!doctype html>",
        "<!DOCTYPEhtml>",
        f"<!DOCTYPE {rng.choice(ATTRIBUTES)}=\"{random_string(rng, 1, 5)}\">",
        f"<!DOCTYPE html charset=\"{random_string(rng, 1, 5)}\">",
        f"<!DOCTYPE html {random_string(rng, 1, 8)}>",
        "<!DOCTYPE",
    ])


def fuzz_text(rng=random):
    return rng.choice([
        lambda: random_string(rng, 1, 30),
        lambda: " " * rng.randint(1, 10),
        lambda: "\r\n" * rng.randint(1, 3),
        lambda: random_string(rng) + ">" + random_string(rng),
        lambda: "<" + random_string(rng, 0, 5),
        lambda: "&amp; " + random_string(rng),
        lambda: "  ",
    ])()


def fuzz_nested_structure(rng=random, depth=0, max_depth=6):
    if depth >= max_depth or rng.random() < 0.3:
        return rng.choice([fuzz_text, fuzz_comment, fuzz_self_closing])(rng)

    tag = rng.choice(TAGS)
    children = "".join(fuzz_nested_structure(rng, depth + 1, max_depth) for _ in range(rng.randint(0, 3)))
    opening = fuzz_start(tag, rng) if rng.random() < 0.2 else f"<{tag}>"

    # Sometimes don't close tags
    if rng.random() < 0.05:
        return f"{opening}{children}"
    # Sometimes mismatch tags
    if rng.random() < 0.05:
        return f"{opening}{children}</{rng.choice(TAGS)}>"
    return f"{opening}{children}{random_whitespace(rng)}</{tag}>"


def fuzz_deeply_nested(rng=random):
    depth = rng.randint(100, 2000)
    tag = rng.choice(["div", "span", "b"])
    return f"<{tag}>" * depth + "x" + f"</{tag}>" * depth


def generate_fuzzed_html(rng=random):
    """Generate a complete fuzzed document.

    ``rng`` is anything with the ``random`` module's interface, e.g. a seeded
    ``random.Random``; the module-level generator is used by default.
    """
    parts = []
    if rng.random() < 0.5:
        parts.append(fuzz_doctype(rng))

    for _ in range(rng.randint(1, 12)):
        generator = rng.choices(
            [
                fuzz_nested_structure,
                fuzz_text,
                fuzz_comment,
                fuzz_self_closing,
                fuzz_close_tag,
                fuzz_doctype,
                fuzz_deeply_nested,
            ],
            weights=[30, 15, 10, 10, 5, 3, 1],
        )[0]
        parts.append(generator(rng))
        parts.append(random_whitespace(rng))
    return "".join(parts)


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    """Run the fuzzer against minihtml."""
    from minihtml import MiniHTML, UnclosedElementError

    rng = random.Random(seed)

    crashes = []
    hangs = []
    nondeterministic = []
    accepted = 0
    rejected = 0

    print(f"Fuzzing minihtml with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html(rng)

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            first = MiniHTML(html, collect_errors=True)
            elapsed = time.perf_counter() - start
            second = MiniHTML(html, collect_errors=True)
        except UnclosedElementError:
            rejected += 1
            continue
        except Exception as e:
            crashes.append({
                "test_num": i,
                "html": html,
                "error": str(e),
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
            continue

        if elapsed > 5.0:
            hangs.append({"test_num": i, "html": html, "time": elapsed})
            if verbose:
                print(f"  HANG: Test {i} took {elapsed:.2f}s")
        elif first.root != second.root or first.errors != second.errors:
            nondeterministic.append({"test_num": i, "html": html})
        else:
            accepted += 1

    elapsed_total = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("FUZZING RESULTS: minihtml")
    print(f"{'=' * 60}")
    print(f"Total tests:      {num_tests}")
    print(f"Accepted:         {accepted}")
    print(f"Unclosed element: {rejected}")
    print(f"Crashes:          {len(crashes)}")
    print(f"Hangs (>5s):      {len(hangs)}")
    print(f"Nondeterministic: {len(nondeterministic)}")
    print(f"Total time:       {elapsed_total:.2f}s")
    print(f"Tests/second:     {num_tests / elapsed_total:.1f}")

    if crashes:
        print(f"\n{'=' * 60}")
        print("CRASH DETAILS:")
        print(f"{'=' * 60}")
        for crash in crashes[:10]:
            print(f"\nTest #{crash['test_num']}:")
            print(f"  HTML: {crash['html'][:200]!r}...")
            print(f"  Error: {crash['error']}")
        if len(crashes) > 10:
            print(f"\n... and {len(crashes) - 10} more crashes")

    failures = crashes + hangs + nondeterministic
    if save_failures and failures:
        filename = f"fuzz_failures_minihtml_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8") as f:
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ===\n")
                f.write(f"HTML:\n{crash['html']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"HTML:\n{hang['html']}\n\n")
            for case in nondeterministic:
                f.write(f"=== NONDETERMINISTIC #{case['test_num']} ===\n")
                f.write(f"HTML:\n{case['html']}\n\n")
        print(f"\nFailures saved to {filename}")

    return not failures


def main():
    parser = argparse.ArgumentParser(description="Fuzz minihtml with corrupted subset-grammar input")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--save-failures", action="store_true", help="Save failures to a file")
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed documents (no parsing)",
    )
    args = parser.parse_args()

    if args.sample:
        rng = random.Random(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i + 1} ===")
            print(generate_fuzzed_html(rng))
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
    )
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
