## generalized matrix transformation operations for 3D homogeneous
## coordinates in yapcsg

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import cos, sin

import numpy as np

import yapcsg.geom as geom
from yapcsg.geom import Vector3

## a matrix is represented as a list of four four-element rows.  In a
## matrix, lists represent rows unless the transpose property is
## true.  Matrices act on column vectors, so ``A.mul(B)`` is the
## transform that applies ``B`` first and ``A`` second.

## Points are carried as ``Vector3`` values everywhere else in the
## kernel; ``transform_point`` lifts them into the w=1 hyperplane,
## multiplies, and projects back.  Normals do not transform like
## points: ``transform_normal`` applies the inverse-transpose of the
## linear part so that perpendicularity survives non-uniform scaling.


class Matrix:
    """4x4 transformation matrix class for transforming homogemenous 3D coordinates"""

    def __init__(self,a=False,trans=False):
        self.m = [[1,0,0,0],
                  [0,1,0,0],
                  [0,0,1,0],
                  [0,0,0,1]]
        self.trans=False

        if isinstance(a,Matrix):
            for i in range(4):
                self.setrow(i,list(a.getrow(i)))

        elif isinstance(a,(tuple,list)):
            if len(a) == 4:
                if all(len(r) == 4 for r in a):
                    for i in range(4):
                        for j in range(4):
                            x =a[i][j]
                            if geom.isgoodnum(x):
                                self.m[i][j]=x
                            else:
                                raise ValueError('bad element in matrix initialization: {}'.format(x))
                else:
                    raise ValueError('bad row length in matrix initialization: {}'.format(a))
            elif len(a)==16:
                for i in range(4):
                    for j in range(4):
                        x = a[i*4+j]
                        if geom.isgoodnum(x):
                            self.m[i][j]=x
                        else:
                            raise ValueError('bad element in matrix initialization: {}'.format(x))
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        elif a is not False and a is not None:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        self.trans=trans

    def __repr__(self):
        return "Matrix({},{},{},{},{})".format(self.m[0],self.m[1],
                                               self.m[2],self.m[3],self.trans)

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return all(self.getrow(i) == other.getrow(i) for i in range(4))

    #return value indexed by i,j
    def get(self,i,j):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to get: {},{}'.format(i,j))
        if self.trans:
            return self.m[j][i]
        else:
            return self.m[i][j]

    #set value indexed by i,j
    def set(self,i,j,x):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to set: {},{}'.format(i,j))
        if geom.isgoodnum(x):
            if self.trans:
                self.m[j][i]=x
            else:
                self.m[i][j]=x
        else:
            raise ValueError('bad value passed to set: {}'.format(x))

    def getrow(self,i):
        if i < 0 or i > 3:
            raise ValueError('bad row passed to getrow: {}'.format(i))
        if self.trans:
            return [self.m[0][i],
                    self.m[1][i],
                    self.m[2][i],
                    self.m[3][i]]
        else:
            return self.m[i]

    def getcol(self,j):
        if j < 0 or j > 3:
            raise ValueError('bad column passed to getcol: {}'.format(j))
        if not self.trans:
            return [self.m[0][j],
                    self.m[1][j],
                    self.m[2][j],
                    self.m[3][j]]
        else:
            return self.m[j]

    def setrow(self,i,x):
        if not (isinstance(x,list) and len(x) == 4):
            raise ValueError('bad non-vector passed to setrow: {}'.format(x))
        if i < 0 or i > 3:
            raise ValueError('bad row index passed to setrow: {}'.format(i))
        if self.trans:
            self.m[0][i] = x[0]
            self.m[1][i] = x[1]
            self.m[2][i] = x[2]
            self.m[3][i] = x[3]
        else:
            self.m[i] = x

    # matrix multiply.  If x is a matrix, compute MX.  If x is a
    # four-element vector, compute Mx. If x is a scalar, compute xM.
    # Respects transpose flag.

    def mul(self,x):
        if isinstance(x,Matrix):
            result = Matrix()
            for i in range(4):
                row = self.getrow(i)
                for j in range(4):
                    col = x.getcol(j)
                    result.set(i,j,row[0]*col[0]+row[1]*col[1]+
                               row[2]*col[2]+row[3]*col[3])
            return result
        elif isinstance(x,(list,tuple)) and len(x) == 4:
            result = [0,0,0,0]
            for i in range(4):
                row = self.getrow(i)
                result[i]=row[0]*x[0]+row[1]*x[1]+row[2]*x[2]+row[3]*x[3]
            return result
        elif geom.isgoodnum(x):
            result = Matrix()
            for i in range(4):
                result.setrow(i,[v*x for v in self.getrow(i)])
            return result

        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def to_numpy(self):
        return np.array([self.getrow(i) for i in range(4)], dtype=float)

    @classmethod
    def from_numpy(cls, arr):
        return cls([[float(arr[i][j]) for j in range(4)] for i in range(4)])

    def inverse(self):
        """numeric inverse; raises ``ValueError`` for a singular matrix"""
        try:
            inv = np.linalg.inv(self.to_numpy())
        except np.linalg.LinAlgError as exc:
            raise ValueError('cannot invert singular matrix {}'.format(self)) from exc
        return Matrix.from_numpy(inv)

    def transform_point(self, p):
        x = self.mul([p[0], p[1], p[2], 1.0])
        if x[3] != 1.0:
            return Vector3(x[0]/x[3], x[1]/x[3], x[2]/x[3])
        return Vector3(x[0], x[1], x[2])

    def transform_direction(self, v):
        """apply the linear part only"""
        x = self.mul([v[0], v[1], v[2], 0.0])
        return Vector3(x[0], x[1], x[2])

    def normal_matrix(self):
        """inverse-transpose of the upper-left 3x3 block, as nested lists"""
        lin = self.to_numpy()[:3, :3]
        try:
            inv = np.linalg.inv(lin)
        except np.linalg.LinAlgError as exc:
            raise ValueError('cannot transform normals with singular matrix {}'.format(self)) from exc
        return inv.T.tolist()

    def is_mirroring(self):
        """True when the linear part flips handedness"""
        return float(np.linalg.det(self.to_numpy()[:3, :3])) < 0.0

    def is_identity(self):
        return self == Matrix()


def transform_normal(nm, n):
    """apply a normal matrix from ``Matrix.normal_matrix`` to ``n``"""
    return Vector3(nm[0][0]*n[0] + nm[0][1]*n[1] + nm[0][2]*n[2],
                   nm[1][0]*n[0] + nm[1][1]*n[1] + nm[1][2]*n[2],
                   nm[2][0]*n[0] + nm[2][1]*n[1] + nm[2][2]*n[2])


# return the generalized 4x4 arbitrary axis rotation matrix, angle in degrees
def Rotation(axis,angle,inverse=False):
    m = geom.Vector3(*axis[:3]).length()
    if m < geom.epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    u = [axis[0]/m, axis[1]/m, axis[2]/m]

    if inverse:
        angle *= -1.0
    rad = (angle%360.0)*geom.pi2/360.0

    ux = u[0]
    uy = u[1]
    uz = u[2]

    cang = cos(rad)
    cmin = 1.0-cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin-uz*sang, ux*uz*cmin+uy*sang,0],
         [uy*ux*cmin+uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang,0],
         [uz*ux*cmin-uy*sang, uz*uy*cmin+ux*sang, cang+uz*uz*cmin,0],
         [0,0,0,1]]

    return Matrix(R)

def Translation(delta,inverse=False):
    dx = delta[0]
    dy = delta[1]
    dz = delta[2]
    if inverse:
        dx, dy, dz = -dx, -dy, -dz
    T = [[1,0,0,dx],
         [0,1,0,dy],
         [0,0,1,dz],
         [0,0,0,1]]
    return Matrix(T)

def Scale(x,y=False,z=False,inverse=False):
    sx = sy = sz = 1.0
    if geom.isgoodnum(x):
        sx = x
        if geom.isgoodnum(y) and geom.isgoodnum(z):
            sy = y
            sz = z
        else:
            sy = sz = x
    elif isinstance(x,(list,tuple)) and len(x) >= 3:
        sx = x[0]
        sy = x[1]
        sz = x[2]
    else:
        raise ValueError('bad scaling values passed to Scale')

    if inverse:
        sx = 1.0/sx
        sy = 1.0/sy
        sz = 1.0/sz

    S = [[sx,0,0,0],
         [0,sy,0,0],
         [0,0,sz,0],
         [0,0,0,1.0]]
    return Matrix(S)

# reflection through the plane {p : dot(n,p) == w}; n need not be unit length
def Mirror(normal,w=0.0):
    n = Vector3(*normal[:3])
    m = n.length()
    if m < geom.epsilon:
        raise ValueError('zero-length mirror plane normal not allowed')
    n = n / m
    w = w / m
    nx, ny, nz = n
    M = [[1.0-2.0*nx*nx, -2.0*nx*ny, -2.0*nx*nz, 2.0*nx*w],
         [-2.0*ny*nx, 1.0-2.0*ny*ny, -2.0*ny*nz, 2.0*ny*w],
         [-2.0*nz*nx, -2.0*nz*ny, 1.0-2.0*nz*nz, 2.0*nz*w],
         [0,0,0,1]]
    return Matrix(M)

# matrix whose columns map the local x, y, z axes onto u, v, n and the
# local origin onto origin
def Basis(u,v,n,origin=(0.0,0.0,0.0)):
    B = [[u[0],v[0],n[0],origin[0]],
         [u[1],v[1],n[1],origin[1]],
         [u[2],v[2],n[2],origin[2]],
         [0,0,0,1]]
    return Matrix(B)
