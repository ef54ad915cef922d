from infquad.quadrature._machine import EPMACH, OFLOW

LIMEXP = 50
"""Maximum number of elements of the epsilon table."""


class EpsilonTable:
    r"""Wynn's epsilon algorithm applied to a sequence of partial sums.

    The lower diagonal of the epsilon table is kept in a list of ``LIMEXP + 2``
    elements. When the table holds `LIMEXP` elements, its oldest part is discarded.

    Attributes
    ----------
    n : int
        Number of elements in the lower diagonal of the table.
    nres : int
        Number of calls of :meth:`extrapolate`.

    Examples
    --------
    The partial sums of a geometric series are extrapolated exactly.

    >>> table = EpsilonTable()
    >>> for value in (1.0, 1.5, 1.75):
    ...     table.append(value)
    >>> table.extrapolate()[0]
    2.0
    """

    __slots__ = ("n", "nres", "_epstab", "_res3la")
    n: int
    nres: int
    _epstab: list[float]
    _res3la: list[float]

    def __init__(self):
        self.n = 0
        self.nres = 0
        self._epstab = [0.0] * (LIMEXP + 2)
        self._res3la = [0.0] * 3

    def append(self, value: float) -> None:
        """Append a new element of the sequence to be extrapolated."""
        if self.n >= LIMEXP:
            # Only possible after a converged extrapolation, which leaves the table
            # unshifted. Keep the newest elements as the shift in extrapolate() does.
            keep = (LIMEXP // 2) * 2 - 1
            self._epstab[:keep] = self._epstab[self.n - keep : self.n]
            self.n = keep

        self._epstab[self.n] = value
        self.n += 1

    def extrapolate(self) -> tuple[float, float]:
        """Compute the extrapolated limit of the elements appended so far.

        Returns
        -------
        r0 : float
            Extrapolated limit.
        r1 : float
            Estimate of the absolute error of `r0`. It is the largest finite float until
            four extrapolations have been performed, and is never smaller than
            ``5 * eps * abs(r0)``.

        Notes
        -----
        If three consecutive elements of a column agree to machine accuracy, convergence
        is assumed and the last of them is returned. Otherwise the estimate of the
        lowest column with the smallest error is returned. The error of the result is
        computed from the differences to the three previous results.
        """
        e = self._epstab
        res3la = self._res3la
        n = self.n
        self.nres += 1
        abserr = OFLOW
        result = e[n - 1]

        if n < 3:
            return result, max(abserr, EPMACH * 5.0 * abs(result))

        e[n + 1] = e[n - 1]
        newelm = (n - 1) // 2
        e[n - 1] = OFLOW
        num = n
        k1 = n - 1

        for i in range(1, newelm + 1):
            k2 = k1 - 1
            k3 = k1 - 2
            res = e[k1 + 2]
            e0 = e[k3]
            e1 = e[k2]
            e2 = res
            e1abs = abs(e1)
            delta2 = e2 - e1
            err2 = abs(delta2)
            tol2 = max(abs(e2), e1abs) * EPMACH
            delta3 = e1 - e0
            err3 = abs(delta3)
            tol3 = max(e1abs, abs(e0)) * EPMACH

            if err2 <= tol2 and err3 <= tol3:
                # e0, e1 and e2 are equal to machine accuracy.
                self.n = n
                return res, max(err2 + err3, EPMACH * 5.0 * abs(res))

            e3 = e[k1]
            e[k1] = e1
            delta1 = e1 - e3
            err1 = abs(delta1)
            tol1 = max(e1abs, abs(e3)) * EPMACH

            # Two elements are very close, or the table behaves irregularly: omit the
            # part of the table beyond this column.
            if err1 <= tol1 or err2 <= tol2 or err3 <= tol3:
                n = i + i - 1
                break

            ss = 1.0 / delta1 + 1.0 / delta2 - 1.0 / delta3

            if abs(ss * e1) <= 1e-4:
                n = i + i - 1
                break

            res = e1 + 1.0 / ss
            e[k1] = res
            k1 -= 2
            error = err2 + abs(res - e2) + err3

            if error <= abserr:
                abserr = error
                result = res

        # Shift the table.
        if n == LIMEXP:
            n = (LIMEXP // 2) * 2 - 1

        ib = 1 if num % 2 == 0 else 0

        for _ in range(newelm + 1):
            e[ib] = e[ib + 2]
            ib += 2

        if num != n:
            indx = num - n

            for i in range(n):
                e[i] = e[indx]
                indx += 1

        self.n = n

        if self.nres < 4:
            res3la[self.nres - 1] = result
            abserr = OFLOW
        else:
            abserr = (
                abs(result - res3la[2])
                + abs(result - res3la[1])
                + abs(result - res3la[0])
            )
            res3la[0] = res3la[1]
            res3la[1] = res3la[2]
            res3la[2] = result

        return result, max(abserr, EPMACH * 5.0 * abs(result))
