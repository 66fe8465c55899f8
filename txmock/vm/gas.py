from ..core.errors import OutOfGasError

class GasMeter:
    """
    Gas budget of one call frame.
    Child frames are funded by carving a budget out of their parent.
    """
    def __init__(self, limit: int):
        self.limit = limit
        self.remaining = limit

    @property
    def used(self) -> int:
        return self.limit - self.remaining

    def charge(self, amount: int):
        if amount > self.remaining:
            self.remaining = 0
            raise OutOfGasError()
        self.remaining -= amount

    def reserve(self, requested: int = None) -> "GasMeter":
        """
        Takes `requested` gas (or everything left) out of this meter and
        returns it as a new meter for a child frame.
        """
        amount = self.remaining if requested is None else requested
        # an unaffordable request leaves this meter untouched
        if amount > self.remaining:
            raise OutOfGasError()
        self.remaining -= amount
        return GasMeter(amount)

    def refund(self, child: "GasMeter"):
        self.remaining += child.remaining

    def __repr__(self):
        return f"GasMeter(limit={self.limit}, remaining={self.remaining})"
