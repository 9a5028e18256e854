from purely import (
    TurnScheduler,
    array_of,
    make_cell,
    match,
    nothing,
    number,
    optional,
    string,
    union,
)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Matching literals")
print("-" * 100)
print()

# Arms are tried in order and the first one that matches wins.
for pet in ["garfield", "odie", "nermal"]:
    food = (
        match(pet)
        .with_("garfield", lambda cat: "lasagna")
        .with_("odie", lambda dog: "anything on the floor")
        .otherwise(lambda other: "no idea")
    )
    print(f"{pet} eats {food}")

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Matching partial shapes")
print("-" * 100)
print()

# Object patterns only look at the keys they declare.
johnny = {"name": {"first": "johnny", "last": "bravo"}, "hair": "tall"}

first_name = match(johnny).with_({"name": {"first": string}}, lambda p: p["name"]["first"]).done()
print(f"first name: {first_name}")

# Array patterns check a prefix.
command = ["move", 3, 4, "quickly"]
print(
    match(command)
    .with_(["jump"], lambda c: "jumping")
    .with_(["move", number, number], lambda c: f"moving to {c[1]}, {c[2]}")
    .done()
)

# Absent keys are only matched by `nothing`.
profile = {"name": "jon"}
print(match(profile).with_({"nickname": nothing}, lambda p: "no nickname").done())
print(match(profile).with_({"nickname": optional(string)}, lambda p: "valid profile").done())

# No match and no fallback hands back the subject.
print(match(True).with_(union(string, number), lambda v: "string or number").done())
print(match([1, 2, 3]).with_(array_of(number), sum).done())

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Mutation cells")
print("-" * 100)
print()

scheduler = TurnScheduler()
read, write = make_cell(100, scheduler=scheduler)


def first_turn():
    read(lambda value: print(f"turn 1 sees {value}"))
    write(lambda current: current + 1)
    # A second write in the same turn is dropped only when asked for explicitly.
    applied = write.tolerant(lambda current: current + 1000)
    print(f"second write applied: {applied}")


scheduler.schedule(first_turn)
scheduler.schedule(lambda: read(lambda value: print(f"turn 2 sees {value}")))
scheduler.run_pending()
