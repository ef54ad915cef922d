class WorkList:
    """Subintervals of :math:`(0,1)` ordered by decreasing error estimate.

    Subintervals live in an arena of parallel lists indexed by slot: `alist` and
    `blist` hold the endpoints, `rlist` the area and `elist` the error estimate.
    `order` lists slots by position, so that ``elist[order[0]] >= elist[order[1]] >=
    ...`` over the part of the list that is kept sorted. Only the neighbourhood of the
    bisected interval is shifted on each update.

    Parameters
    ----------
    limit : int
        Maximum number of subintervals.

    Attributes
    ----------
    size : int
        Number of subintervals currently in the list.
    nrmax : int
        Position in `order` of the interval to be bisected next.
    maxerr : int
        Slot of the interval to be bisected next, i.e. ``order[nrmax]``.
    errmax : float
        Error estimate of the interval in `maxerr`.
    """

    __slots__ = (
        "limit",
        "alist",
        "blist",
        "rlist",
        "elist",
        "order",
        "size",
        "nrmax",
        "maxerr",
        "errmax",
    )
    limit: int
    alist: list[float]
    blist: list[float]
    rlist: list[float]
    elist: list[float]
    order: list[int]
    size: int
    nrmax: int
    maxerr: int
    errmax: float

    def __init__(self, limit: int):
        if limit < 1:
            raise ValueError

        self.limit = limit
        self.alist = [0.0] * limit
        self.blist = [0.0] * limit
        self.rlist = [0.0] * limit
        self.elist = [0.0] * limit
        self.order = [0] * limit
        self.size = 0
        self.nrmax = 0
        self.maxerr = 0
        self.errmax = 0.0

    def start(self, area: float, error: float) -> None:
        """Reset the list to the single interval :math:`(0,1)`."""
        self.alist[0] = 0.0
        self.blist[0] = 1.0
        self.rlist[0] = area
        self.elist[0] = error
        self.order[0] = 0
        self.size = 1
        self.nrmax = 0
        self.maxerr = 0
        self.errmax = error

    def split(
        self,
        a1: float,
        b1: float,
        area1: float,
        error1: float,
        a2: float,
        b2: float,
        area2: float,
        error2: float,
    ) -> None:
        """Replace the interval in `maxerr` by its halves ``(a1, b1)`` and ``(a2, b2)``.

        The half with the larger error keeps the slot of the parent and the other one is
        appended. The list is reordered afterwards.
        """
        if self.size >= self.limit:
            raise RuntimeError("work list is full")

        maxerr = self.maxerr
        last = self.size
        self.size += 1

        if error2 > error1:
            self.alist[maxerr] = a2
            self.alist[last] = a1
            self.blist[last] = b1
            self.rlist[maxerr] = area2
            self.rlist[last] = area1
            self.elist[maxerr] = error2
            self.elist[last] = error1
        else:
            self.alist[last] = a2
            self.blist[maxerr] = b1
            self.blist[last] = b2
            self.rlist[maxerr] = area1
            self.rlist[last] = area2
            self.elist[maxerr] = error1
            self.elist[last] = error2

        self.sort()

    def sort(self) -> None:
        """Restore the descending ordering after the interval in `maxerr` has been
        bisected and its second half appended in the last slot, then select the interval
        with the `nrmax`-th largest error estimate.

        If the number of intervals exceeds ``limit // 2 + 2``, only the ``limit + 3 -
        size`` largest errors are kept in order, since no more intervals than that can be
        bisected before the limit is reached.
        """
        order = self.order
        elist = self.elist
        size = self.size

        if size <= 2:
            order[0] = 0
            order[1] = 1
            self.select(self.nrmax)
            return

        maxerr = self.maxerr
        errmax = elist[maxerr]
        nrmax = self.nrmax

        # Only reached for a difficult integrand whose error grew by the bisection: move
        # errmax up past the smaller errors in front of it.
        for _ in range(nrmax):
            isucc = order[nrmax - 1]

            if errmax <= elist[isucc]:
                break

            order[nrmax] = isucc
            nrmax -= 1

        jupbn = size - 1

        if size > self.limit // 2 + 2:
            jupbn = self.limit + 2 - size

        errmin = elist[size - 1]
        jbnd = jupbn - 1

        # Insert errmax top-down starting after position nrmax, then errmin bottom-up.
        for i in range(nrmax + 1, jbnd + 1):
            isucc = order[i]

            if errmax >= elist[isucc]:
                break

            order[i - 1] = isucc
        else:
            order[jbnd] = maxerr
            order[jupbn] = size - 1
            self.select(nrmax)
            return

        order[i - 1] = maxerr
        k = jbnd

        for _ in range(i, jbnd + 1):
            isucc = order[k]

            if errmin < elist[isucc]:
                break

            order[k + 1] = isucc
            k -= 1

        order[k + 1] = size - 1
        self.select(nrmax)

    def select(self, position: int) -> None:
        """Make the interval at `position` of the ordering the next to be bisected."""
        self.nrmax = position
        self.maxerr = self.order[position]
        self.errmax = self.elist[self.maxerr]

    def width(self, slot: int) -> float:
        return abs(self.blist[slot] - self.alist[slot])

    def total(self) -> float:
        """Return the sum of the areas of all intervals."""
        return sum(self.rlist[: self.size])

    def intervals(self) -> tuple[tuple[float, float], ...]:
        """Return the endpoints of all intervals in slot order."""
        return tuple(zip(self.alist[: self.size], self.blist[: self.size]))

    def __len__(self) -> int:
        return self.size
