"""Helper script."""


class Runner:
    def run(self):
        return compute_value()


def compute_value():
    return 42
