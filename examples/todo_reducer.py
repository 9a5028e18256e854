from purely import MutationCell, TurnScheduler, match, one_of, string

scheduler = TurnScheduler()
todos = MutationCell({"items": [], "filter": "all"}, scheduler=scheduler)


def reducer(command):
    def apply(state):
        return (
            match(command)
            .with_(
                {"type": "add", "text": string},
                lambda c: {**state, "items": state["items"] + [c["text"]]},
            )
            .with_(
                {"type": "filter", "value": one_of("all", "open", "done")},
                lambda c: {**state, "filter": c["value"]},
            )
            .otherwise(lambda c: state)
        )

    return apply


def dispatch(command):
    # Each command is applied in a turn of its own.
    scheduler.schedule(lambda: todos.write(reducer(command)))


def render(state, previous):
    print(f"items={state['items']} filter={state['filter']}")


dispatch({"type": "add", "text": "feed garfield"})
dispatch({"type": "add", "text": "walk odie"})
dispatch({"type": "filter", "value": "open"})
dispatch({"type": "typo"})
todos.read_later(render)
scheduler.run_pending()

# ==================================================
# items=['feed garfield', 'walk odie'] filter=open
